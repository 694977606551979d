"""gradpass constants and thresholds.

All magic numbers live here. No exceptions.
"""

# Check-in provenance
SOURCE_SCANNER = "scanner"
SOURCE_MANUAL = "manual"
CHECKIN_SOURCES = (SOURCE_SCANNER, SOURCE_MANUAL)

# Ticket holder roles
ROLE_STUDENT = "student"
ROLE_GUEST = "guest"
INVITEE_ROLES = (ROLE_STUDENT, ROLE_GUEST)

# Operator labels
DEFAULT_OPERATOR = "Mobile operator"
HYDRATED_OPERATOR = "System"  # Listing rows without an operator

# Outcome statuses surfaced to the operator
STATUS_ADMITTED = "admitted"
STATUS_DUPLICATE = "duplicate"
STATUS_QUEUED = "queued"
STATUS_UNKNOWN_TICKET = "unknown_ticket"

# Offline queue storage
QUEUE_STORAGE_VERSION = 1
QUEUE_FILE_TEMPLATE = "pending_v{version}.json"
SYNC_STATE_FILE = "sync_state.json"
QUEUE_KEY_SEPARATOR = "-"

# Backpressure: warn (never drop) once the queue grows past this
QUEUE_WARN_THRESHOLD = 500

# Remote endpoint
DEFAULT_TIMEOUT_SECONDS = 10.0
PROBE_TIMEOUT_SECONDS = 2.0
DEFAULT_PROBE_INTERVAL_SECONDS = 15.0
