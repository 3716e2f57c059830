import json
import logging
import os
from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from typing import List, Optional
from urllib.parse import quote
from config import HTTP_FOUND, RECENT_REPLIES_LIMIT, VIEWS_DIR
from database import BoardStore
from exceptions import BoardError, InvalidPayloadError, Messages, StoreError
from models import (ReplyCreate, ReplyDelete, ReplyReport, ThreadCreate, ThreadDelete,
                    ThreadReport, ThreadResponse, ThreadSummaryResponse)
from security import PasswordHasher
from threads import Thread

logger = logging.getLogger(__name__)

store: BoardStore = None
hasher: PasswordHasher = None

# Failures every operation boundary absorbs into a plain-text answer
HANDLED_ERRORS = (ValidationError, BoardError)


def text(message: str) -> PlainTextResponse:
    return PlainTextResponse(message)


def log_failure(action: str, exc: Exception):
    if isinstance(exc, StoreError):
        logger.exception("%s failed", action)
    else:
        logger.warning("%s rejected: %s", action, exc)


async def read_payload(request: Request) -> dict:
    """Request fields from a JSON or form-encoded body"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring malformed JSON body on %s", request.url.path)
            return {}
        return body if isinstance(body, dict) else {}

    try:
        form = await request.form()
    except (HTTPException, MultiPartException, UnicodeDecodeError) as e:
        raise InvalidPayloadError(f"Unreadable form body on {request.url.path}") from e
    return {key: value for key, value in form.items() if isinstance(value, str)}


def thread_summary(thread: Thread) -> dict:
    view = ThreadSummaryResponse.model_validate(thread.public_view(reply_limit=RECENT_REPLIES_LIMIT))
    return view.model_dump(mode="json", by_alias=True)


def thread_detail(thread: Thread) -> dict:
    view = ThreadResponse.model_validate(thread.public_view())
    return view.model_dump(mode="json", by_alias=True)


# =============================================================================
# THREAD ENDPOINTS
# =============================================================================

def create_thread_router() -> APIRouter:
    router = APIRouter(prefix="/api/threads", tags=["threads"])

    @router.post("/{board}")
    async def create_thread(board: str, request: Request):
        """Create a thread and redirect to its board"""
        try:
            payload = await read_payload(request)
            data = ThreadCreate.model_validate(payload)
            thread = Thread.create(data.text, await run_in_threadpool(hasher.hash_password, data.delete_password))
            await store.insert_thread(thread)
        except HANDLED_ERRORS as e:
            log_failure("Create thread", e)
            return text(Messages.ERROR_CREATING_THREAD)

        logger.info("Created thread %s on board %s", thread.thread_id, board)
        return RedirectResponse(f"/b/{quote(board)}/", status_code=HTTP_FOUND)

    @router.get("/{board}")
    async def list_threads(board: str):
        """10 most recently bumped threads with their last 3 replies"""
        try:
            threads: List[Thread] = await store.list_recent()
        except HANDLED_ERRORS as e:
            log_failure("List threads", e)
            return text(Messages.ERROR_GETTING_THREADS)

        return JSONResponse([thread_summary(thread) for thread in threads])

    @router.put("/{board}")
    async def report_thread(board: str, request: Request):
        """Flag a thread for moderation"""
        try:
            payload = await read_payload(request)
            data = ThreadReport.model_validate(payload)
            found = await store.set_thread_reported(data.target_id)
        except HANDLED_ERRORS as e:
            log_failure("Report thread", e)
            return text(Messages.ERROR)

        if found:
            logger.info("Thread %s reported", data.target_id)
        else:
            logger.warning("Report for unknown thread %s", data.target_id)
        return text(Messages.REPORTED)

    @router.delete("/{board}")
    async def delete_thread(board: str, request: Request):
        """Remove a thread and all its replies when the password matches"""
        try:
            payload = await read_payload(request)
            data = ThreadDelete.model_validate(payload)
            thread = await store.get_thread(data.thread_id)
            if thread is None:
                return text(Messages.THREAD_NOT_FOUND)

            if not await run_in_threadpool(hasher.verify_password, data.delete_password, thread.delete_password):
                logger.warning("Incorrect password for thread %s", thread.thread_id)
                return text(Messages.INCORRECT_PASSWORD)

            await store.delete_thread(thread.thread_id)
        except HANDLED_ERRORS as e:
            log_failure("Delete thread", e)
            return text(Messages.INCORRECT_PASSWORD)

        logger.info("Deleted thread %s", thread.thread_id)
        return text(Messages.SUCCESS)

    return router

# =============================================================================
# REPLY ENDPOINTS
# =============================================================================

def create_reply_router() -> APIRouter:
    router = APIRouter(prefix="/api/replies", tags=["replies"])

    @router.post("/{board}")
    async def create_reply(board: str, request: Request):
        """Append a reply, bump the thread and redirect to it"""
        try:
            payload = await read_payload(request)
            data = ReplyCreate.model_validate(payload)
            thread = await store.get_thread(data.thread_id)
            if thread is None:
                return text(Messages.THREAD_NOT_FOUND)

            reply = thread.add_reply(data.text, await run_in_threadpool(hasher.hash_password, data.delete_password))
            await store.save_thread(thread)
        except HANDLED_ERRORS as e:
            log_failure("Create reply", e)
            return text(Messages.ERROR_POSTING_REPLY)

        logger.info("Added reply %s to thread %s", reply.reply_id, thread.thread_id)
        return RedirectResponse(f"/b/{quote(board)}/{thread.thread_id}/", status_code=HTTP_FOUND)

    @router.get("/{board}")
    async def view_thread(board: str, thread_id: Optional[str] = None):
        """A single thread with every reply"""
        try:
            thread = await store.get_thread(thread_id)
        except HANDLED_ERRORS as e:
            log_failure("View thread", e)
            return text(Messages.ERROR_GETTING_THREAD)

        if thread is None:
            return text(Messages.THREAD_NOT_FOUND)
        return JSONResponse(thread_detail(thread))

    @router.put("/{board}")
    async def report_reply(board: str, request: Request):
        """Flag a reply for moderation"""
        try:
            payload = await read_payload(request)
            data = ReplyReport.model_validate(payload)
            thread = await store.get_thread(data.thread_id)
            if thread is None:
                return text(Messages.THREAD_NOT_FOUND)

            reply = thread.find_reply(data.reply_id)
            if reply is None:
                return text(Messages.REPLY_NOT_FOUND)

            reply.reported = True
            await store.save_thread(thread)
        except HANDLED_ERRORS as e:
            log_failure("Report reply", e)
            return text(Messages.ERROR)

        logger.info("Reply %s in thread %s reported", reply.reply_id, thread.thread_id)
        return text(Messages.SUCCESS)

    @router.delete("/{board}")
    async def delete_reply(board: str, request: Request):
        """Redact a reply's text when the password matches"""
        try:
            payload = await read_payload(request)
            data = ReplyDelete.model_validate(payload)
            thread = await store.get_thread(data.thread_id)
            if thread is None:
                return text(Messages.THREAD_NOT_FOUND)

            reply = thread.find_reply(data.reply_id)
            if reply is None:
                return text(Messages.REPLY_NOT_FOUND)

            if not await run_in_threadpool(hasher.verify_password, data.delete_password, reply.delete_password):
                logger.warning("Incorrect password for reply %s", reply.reply_id)
                return text(Messages.INCORRECT_PASSWORD)

            reply.redact()
            await store.save_thread(thread)
        except HANDLED_ERRORS as e:
            log_failure("Delete reply", e)
            return text(Messages.INCORRECT_PASSWORD)

        logger.info("Redacted reply %s in thread %s", reply.reply_id, thread.thread_id)
        return text(Messages.SUCCESS)

    return router

# =============================================================================
# LANDING PAGES
# =============================================================================

def create_page_router() -> APIRouter:
    router = APIRouter(tags=["pages"])

    @router.get("/")
    async def serve_index():
        return FileResponse(os.path.join(VIEWS_DIR, "index.html"))

    @router.get("/b/{board}/")
    async def serve_board(board: str):
        return FileResponse(os.path.join(VIEWS_DIR, "board.html"))

    @router.get("/b/{board}/{thread_id}/")
    async def serve_thread(board: str, thread_id: str):
        return FileResponse(os.path.join(VIEWS_DIR, "thread.html"))

    return router


def get_all_routers() -> List[APIRouter]:
    """Get all routers"""
    return [
        create_thread_router(),
        create_reply_router(),
        create_page_router(),
    ]


def initialize_endpoints(database: BoardStore, password_hasher: PasswordHasher):
    """Initialize global dependencies for endpoints"""
    global store, hasher

    store = database
    hasher = password_hasher
