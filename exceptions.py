class BoardError(Exception):
    """Base class for board service failures."""


class InvalidIdError(BoardError):
    """Identifier is missing or not a 24-character hex string."""

    def __init__(self, value):
        super().__init__(f"Invalid identifier: {value!r}")
        self.value = value


class StoreError(BoardError):
    """The underlying document store rejected an operation."""


class InvalidPayloadError(BoardError):
    """Request body could not be parsed as JSON or form data."""


class Messages:
    THREAD_NOT_FOUND = "Thread not found"
    REPLY_NOT_FOUND = "Reply not found"
    SUCCESS = "success"
    REPORTED = "reported"
    INCORRECT_PASSWORD = "incorrect password"
    ERROR = "error"
    ERROR_CREATING_THREAD = "Error creating thread"
    ERROR_GETTING_THREADS = "Error getting threads"
    ERROR_POSTING_REPLY = "Error posting reply"
    ERROR_GETTING_THREAD = "Error getting thread"
