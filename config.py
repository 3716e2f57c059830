import os

DB_PATH = os.getenv("DB_PATH", "board.db")
ALLOWED_ORIGINS = ["*"]

# Server Configuration
DEFAULT_HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "3000"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

# Board Behaviour
RECENT_THREADS_LIMIT = 10
RECENT_REPLIES_LIMIT = 3
DELETED_TEXT = "[deleted]"
OBJECT_ID_BYTES = 12  # 24 hex characters

# Security Settings
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
DELETE_PASSWORD_MAX_BYTES = 72  # bcrypt input limit
MAX_REQUEST_SIZE_MB = 1
GZIP_MIN_SIZE = 1000

# HTTP Status Codes
HTTP_FOUND = 302
HTTP_REQUEST_ENTITY_TOO_LARGE = 413

# Static pages
VIEWS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "views")
