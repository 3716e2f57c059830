import aiosqlite
import json
import logging
from functools import wraps
from typing import List, Optional
from config import RECENT_THREADS_LIMIT
from exceptions import StoreError
from threads import Reply, Thread, validate_object_id

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS threads (
    thread_id TEXT PRIMARY KEY,
    text TEXT NOT NULL,
    created_on REAL NOT NULL,
    bumped_on REAL NOT NULL,
    delete_password TEXT NOT NULL,
    reported INTEGER NOT NULL DEFAULT 0,
    replies TEXT NOT NULL DEFAULT '[]'
);

CREATE INDEX IF NOT EXISTS idx_threads_bumped_on ON threads(bumped_on);
"""


def store_operation(func):
    """Translate driver and decoding failures into StoreError."""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (aiosqlite.Error, ValueError, KeyError, TypeError) as e:
            raise StoreError(f"{func.__name__} failed: {e}") from e
    return wrapper


def thread_from_row(row) -> Thread:
    return Thread(
        thread_id=row["thread_id"],
        text=row["text"],
        delete_password=row["delete_password"],
        created_on=row["created_on"],
        bumped_on=row["bumped_on"],
        reported=bool(row["reported"]),
        replies=[Reply.from_document(doc) for doc in json.loads(row["replies"])],
    )


def thread_params(thread: Thread) -> tuple:
    return (
        thread.text,
        thread.created_on,
        thread.bumped_on,
        thread.delete_password,
        thread.reported,
        json.dumps([reply.to_document() for reply in thread.replies]),
        thread.thread_id,
    )


class BoardStore:
    """Thread documents, each with its replies embedded, kept in one SQLite table."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def execute_query(self, query: str, params: tuple = (), fetch_one: bool = False):
        async with aiosqlite.connect(self.db_path) as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.cursor()
            await cursor.execute(query, params)

            if fetch_one:
                result = await cursor.fetchone()
            else:
                result = await cursor.fetchall()
            await cursor.close()
            return result

    async def execute_write(self, query: str, params: tuple = ()) -> int:
        async with aiosqlite.connect(self.db_path) as conn:
            cursor = await conn.cursor()
            await cursor.execute(query, params)
            await conn.commit()
            rowcount = cursor.rowcount
            await cursor.close()
            return rowcount

    @store_operation
    async def init_schema(self):
        async with aiosqlite.connect(self.db_path) as conn:
            await conn.executescript(SCHEMA)
            await conn.commit()
        logger.info("Thread store ready at %s", self.db_path)

    @store_operation
    async def insert_thread(self, thread: Thread) -> Thread:
        await self.execute_write("""
            INSERT INTO threads (text, created_on, bumped_on, delete_password, reported, replies, thread_id)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, thread_params(thread))
        return thread

    @store_operation
    async def get_thread(self, thread_id) -> Optional[Thread]:
        """Load a thread by id; None if it does not exist"""
        thread_id = validate_object_id(thread_id)
        row = await self.execute_query(
            "SELECT * FROM threads WHERE thread_id = ?", (thread_id,), fetch_one=True
        )
        return thread_from_row(row) if row else None

    @store_operation
    async def list_recent(self, limit: int = RECENT_THREADS_LIMIT) -> List[Thread]:
        """Most recently bumped threads first"""
        rows = await self.execute_query("""
            SELECT * FROM threads
            ORDER BY bumped_on DESC, rowid DESC
            LIMIT ?
        """, (limit,))
        return [thread_from_row(row) for row in rows]

    @store_operation
    async def save_thread(self, thread: Thread) -> Thread:
        """Re-save the whole document; the last writer wins"""
        updated = await self.execute_write("""
            UPDATE threads
            SET text = ?, created_on = ?, bumped_on = ?, delete_password = ?, reported = ?, replies = ?
            WHERE thread_id = ?
        """, thread_params(thread))
        if not updated:
            raise StoreError(f"Thread {thread.thread_id} no longer exists")
        return thread

    @store_operation
    async def set_thread_reported(self, thread_id) -> bool:
        thread_id = validate_object_id(thread_id)
        updated = await self.execute_write(
            "UPDATE threads SET reported = 1 WHERE thread_id = ?", (thread_id,)
        )
        return updated > 0

    @store_operation
    async def delete_thread(self, thread_id) -> bool:
        thread_id = validate_object_id(thread_id)
        deleted = await self.execute_write(
            "DELETE FROM threads WHERE thread_id = ?", (thread_id,)
        )
        return deleted > 0
