"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_TTL_MINUTES = 120
DEFAULT_MAX_UPLOAD_SIZE_MB = 10
DEFAULT_STATUS = "present"

UNRESOLVED_EMPLOYEE_ERROR = "Employee not found in database"
BULK_NOTE_PREFIX = "Bulk upload"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
