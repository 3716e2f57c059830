import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from config import DELETED_TEXT, OBJECT_ID_BYTES, RECENT_REPLIES_LIMIT
from exceptions import InvalidIdError

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")


def timestamp() -> float:
    return datetime.now(timezone.utc).timestamp()


def new_object_id() -> str:
    return secrets.token_hex(OBJECT_ID_BYTES)


def validate_object_id(value: Any) -> str:
    """Return the identifier normalised to lowercase, or raise InvalidIdError."""
    if not isinstance(value, str) or not OBJECT_ID_PATTERN.match(value.lower()):
        raise InvalidIdError(value)
    return value.lower()


def to_datetime(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, timezone.utc)


@dataclass(slots=True)
class Reply:
    reply_id: str
    text: str
    delete_password: str
    created_on: float = field(default_factory=timestamp)
    reported: bool = False

    def __str__(self) -> str:
        reported_marker = " [REPORTED]" if self.reported else ""
        return f"Reply {self.reply_id}: {self.text[:50]}{reported_marker}"

    def redact(self) -> None:
        self.text = DELETED_TEXT

    def to_document(self) -> dict:
        return {
            "_id": self.reply_id,
            "text": self.text,
            "created_on": self.created_on,
            "delete_password": self.delete_password,
            "reported": self.reported,
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Reply":
        return cls(
            reply_id=doc["_id"],
            text=doc["text"],
            delete_password=doc["delete_password"],
            created_on=doc["created_on"],
            reported=bool(doc.get("reported", False)),
        )

    def public_view(self) -> dict:
        return {
            "_id": self.reply_id,
            "text": self.text,
            "created_on": to_datetime(self.created_on),
        }


@dataclass(slots=True)
class Thread:
    thread_id: str
    text: str
    delete_password: str
    created_on: float = field(default_factory=timestamp)
    bumped_on: float = 0.0
    reported: bool = False
    replies: list[Reply] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.bumped_on:
            self.bumped_on = self.created_on

    def __str__(self) -> str:
        reported_marker = " [REPORTED]" if self.reported else ""
        return f"Thread {self.thread_id}: {self.text[:50]}{reported_marker}"

    @classmethod
    def create(cls, text: str, delete_password: str) -> "Thread":
        return cls(new_object_id(), text, delete_password)

    @property
    def replycount(self) -> int:
        return len(self.replies)

    def add_reply(self, text: str, delete_password: str) -> Reply:
        """Append a reply and bump the thread to the reply's creation time."""
        taken = {reply.reply_id for reply in self.replies}
        reply_id = new_object_id()
        while reply_id in taken:
            reply_id = new_object_id()

        # never move backwards if the clock steps back
        now = max(timestamp(), self.bumped_on)
        reply = Reply(reply_id, text, delete_password, created_on=now)
        self.replies.append(reply)
        self.bumped_on = now
        return reply

    def find_reply(self, reply_id: str) -> Optional[Reply]:
        reply_id = validate_object_id(reply_id)
        for reply in self.replies:
            if reply.reply_id == reply_id:
                return reply
        return None

    def recent_replies(self, limit: int = RECENT_REPLIES_LIMIT) -> list[Reply]:
        """Return the last ``limit`` replies in chronological order."""
        if limit <= 0:
            return []
        return self.replies[-limit:]

    def public_view(self, reply_limit: Optional[int] = None) -> dict:
        """Client-facing projection with passwords and report flags stripped.

        With ``reply_limit`` set, only the most recent replies are shown and
        ``replycount`` carries the full count.
        """
        view = {
            "_id": self.thread_id,
            "text": self.text,
            "created_on": to_datetime(self.created_on),
            "bumped_on": to_datetime(self.bumped_on),
        }
        if reply_limit is None:
            view["replies"] = [reply.public_view() for reply in self.replies]
        else:
            view["replycount"] = self.replycount
            view["replies"] = [reply.public_view() for reply in self.recent_replies(reply_limit)]
        return view
