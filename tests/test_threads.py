"""
Tests for the Thread and Reply records.

Covers identifier handling, reply bumping, redaction and the
client-facing projections.
"""

import pytest

from config import DELETED_TEXT
from exceptions import InvalidIdError
from threads import OBJECT_ID_PATTERN, Reply, Thread, new_object_id, validate_object_id


def make_thread_with_replies(count: int) -> Thread:
    thread = Thread.create("Test Thread", "thread-secret")
    for i in range(count):
        thread.add_reply(f"Reply {i}", f"secret-{i}")
    return thread


class TestIdentifiers:
    def test_new_ids_are_24_hex(self):
        assert OBJECT_ID_PATTERN.match(new_object_id())

    def test_validate_normalises_case(self):
        assert validate_object_id("ABCDEF0123456789ABCDEF01") == "abcdef0123456789abcdef01"

    @pytest.mark.parametrize("value", [None, "", "123", "zz" * 12, 42, "a" * 25])
    def test_validate_rejects_malformed(self, value):
        with pytest.raises(InvalidIdError):
            validate_object_id(value)


class TestThread:
    def test_create_sets_defaults(self):
        thread = Thread.create("Hello", "pw")

        assert thread.replies == []
        assert thread.reported is False
        assert thread.bumped_on == thread.created_on
        assert thread.replycount == 0

    def test_add_reply_bumps_thread(self):
        thread = Thread.create("Hello", "pw")
        prior_bump = thread.bumped_on

        reply = thread.add_reply("First!", "reply-pw")

        assert thread.replies == [reply]
        assert reply.created_on >= prior_bump
        assert thread.bumped_on == reply.created_on
        assert reply.reported is False

    def test_reply_ids_unique_within_thread(self):
        thread = make_thread_with_replies(20)
        ids = [reply.reply_id for reply in thread.replies]
        assert len(set(ids)) == len(ids)

    def test_find_reply(self):
        thread = make_thread_with_replies(3)
        target = thread.replies[1]

        assert thread.find_reply(target.reply_id) is target
        assert thread.find_reply(target.reply_id.upper()) is target
        assert thread.find_reply(new_object_id()) is None

    def test_find_reply_rejects_malformed_id(self):
        thread = make_thread_with_replies(1)
        with pytest.raises(InvalidIdError):
            thread.find_reply("not-an-id")

    def test_recent_replies_keeps_last_three_in_order(self):
        thread = make_thread_with_replies(5)
        recent = thread.recent_replies()
        assert [reply.text for reply in recent] == ["Reply 2", "Reply 3", "Reply 4"]

    def test_recent_replies_with_fewer_replies(self):
        thread = make_thread_with_replies(2)
        assert len(thread.recent_replies()) == 2


class TestRedaction:
    def test_redact_keeps_position_and_identity(self):
        thread = make_thread_with_replies(3)
        target = thread.replies[1]
        reply_id, created_on = target.reply_id, target.created_on

        target.redact()

        assert thread.replies[1] is target
        assert target.text == DELETED_TEXT
        assert target.reply_id == reply_id
        assert target.created_on == created_on
        assert thread.replycount == 3


class TestPublicView:
    def test_full_view_strips_secrets(self):
        thread = make_thread_with_replies(4)
        thread.reported = True
        thread.replies[0].reported = True

        view = thread.public_view()

        assert set(view) == {"_id", "text", "created_on", "bumped_on", "replies"}
        assert len(view["replies"]) == 4
        for reply in view["replies"]:
            assert set(reply) == {"_id", "text", "created_on"}

    def test_summary_view_truncates_but_counts_all(self):
        thread = make_thread_with_replies(7)

        view = thread.public_view(reply_limit=3)

        assert view["replycount"] == 7
        assert [reply["text"] for reply in view["replies"]] == ["Reply 4", "Reply 5", "Reply 6"]
        assert "delete_password" not in view
        assert "reported" not in view


class TestDocuments:
    def test_reply_document_keeps_stored_fields(self):
        reply = Reply(new_object_id(), "text", "hash", reported=True)
        restored = Reply.from_document(reply.to_document())

        assert restored == reply
