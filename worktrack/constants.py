ADMIN_ROLES = frozenset({"OWNER", "ADMIN"})

VACATION_PENDING = "pending"
VACATION_APPROVED = "approved"
VACATION_REJECTED = "rejected"
VACATION_STATUSES = (VACATION_PENDING, VACATION_APPROVED, VACATION_REJECTED)

ACTION_START_TRACKING = "START_TRACKING"
ACTION_STOP_TRACKING = "STOP_TRACKING"
ACTION_CREATE = "CREATE"
ACTION_UPDATE = "UPDATE"
ACTION_DELETE = "DELETE"
ACTION_AUTO_BREAK_ADDED = "AUTO_BREAK_ADDED"

ENTITY_TIME_ENTRY = "TIME_ENTRY"
ENTITY_BREAK = "BREAK"
ENTITY_VACATION = "VACATION"
