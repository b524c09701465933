"""Socket.IO protocol constants: event names and role values.

Pure data module -- no imports, no logic. Safe to import from any pairroom
module without risk of circular dependencies. The event names are shared
with the browser client and must not change.
"""

# ── Client -> Server events ───────────────────────────────────────────

EVT_CONNECT = "connect"
EVT_DISCONNECT = "disconnect"
EVT_JOIN_ROOM = "join-room"
EVT_CODE_CHANGE = "code-change"
EVT_SEND_MESSAGE = "send-message"

# ── Server -> Client events ───────────────────────────────────────────

EVT_ROLE_ASSIGNED = "role-assigned"
EVT_USER_COUNT = "user-count"
EVT_CODE_UPDATE = "code-update"
EVT_RECEIVE_MESSAGE = "receive-message"
EVT_MENTOR_LEFT = "mentor-left"

# ── Roles ─────────────────────────────────────────────────────────────

ROLE_MENTOR = "mentor"
ROLE_STUDENT = "student"
