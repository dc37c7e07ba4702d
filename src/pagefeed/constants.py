"""
Constants used throughout the application.

Includes pagination defaults, timeouts, and error message templates.
"""

from enum import Enum

# ============================================================================
# Remote Collection Defaults
# ============================================================================

DEFAULT_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_RESOURCE = "posts"

# Query parameter names understood by the collection endpoint
DEFAULT_PAGE_PARAM = "_page"
DEFAULT_LIMIT_PARAM = "_limit"

# ============================================================================
# Pagination Defaults
# ============================================================================

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MIN_PAGE_SIZE = 1
FIRST_PAGE = 1

# ============================================================================
# Timeout Values (seconds)
# ============================================================================

DEFAULT_REQUEST_TIMEOUT = 15.0
MAX_REQUEST_TIMEOUT = 300.0

# Maximum characters of a non-2xx body kept on HttpStatusError
DEFAULT_ERROR_BODY_LIMIT = 500

# Maximum characters of an undecodable payload written to the debug log
PAYLOAD_LOG_LIMIT = 1000

# ============================================================================
# Log Formats
# ============================================================================


class LogFormat(str, Enum):
    """Output format for log records."""

    TEXT = "text"  # Human-readable lines
    JSON = "json"  # One JSON object per line


TEXT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_LOG_FORMAT = (
    '{"time":"%(asctime)s","name":"%(name)s","level":"%(levelname)s","message":"%(message)s"}'
)

# ============================================================================
# Error Messages
# ============================================================================

ERROR_INVALID_REQUEST = "Invalid request: {detail}"
ERROR_HTTP_STATUS = "Server returned HTTP {status_code}"
ERROR_DECODING = "Failed to decode: {cause}"
ERROR_TRANSPORT = "Network error: {cause}"
ERROR_UNEXPECTED = "Unexpected error: {cause}"
