"""Event type constants.

Learn: These are the event names Planka sends in its webhook payloads.
Centralizing them prevents typos in the mapping table and makes it easy
to see which board events the service reacts to.
"""

# ─── Cards ───────────────────────────────────────────────

CARD_CREATE = "cardCreate"
CARD_UPDATE = "cardUpdate"
CARD_DELETE = "cardDelete"

# ─── Lists ───────────────────────────────────────────────

LIST_CREATE = "listCreate"
LIST_UPDATE = "listUpdate"
LIST_DELETE = "listDelete"

# ─── Boards + labels ─────────────────────────────────────

BOARD_CREATE = "boardCreate"
BOARD_UPDATE = "boardUpdate"
BOARD_DELETE = "boardDelete"

LABEL_CREATE = "labelCreate"
LABEL_UPDATE = "labelUpdate"
LABEL_DELETE = "labelDelete"

# ─── Card children ───────────────────────────────────────

COMMENT_CREATE = "commentCreate"
COMMENT_UPDATE = "commentUpdate"
COMMENT_DELETE = "commentDelete"

TASK_CREATE = "taskCreate"
TASK_UPDATE = "taskUpdate"
TASK_DELETE = "taskDelete"

ATTACHMENT_CREATE = "attachmentCreate"
ATTACHMENT_UPDATE = "attachmentUpdate"
ATTACHMENT_DELETE = "attachmentDelete"

# ─── Notifications ───────────────────────────────────────

NOTIFICATION_CREATE = "notificationCreate"

# Used when a channel message carries no type
UNKNOWN = "unknown"
