"""Event type constants.

Centralizing event types as constants prevents typos and makes it easy
to discover everything the audit log records.
"""

# ─── Identity ────────────────────────────────────────────

USER_REGISTERED = "user.registered"
USER_PROFILE_UPDATED = "user.profile_updated"
USER_ACTIVE_CHANGED = "user.active_changed"
PERMISSIONS_CHANGED = "user.permissions_changed"

# ─── Land ────────────────────────────────────────────────

LAND_CREATED = "land.created"
LAND_UPDATED = "land.updated"
LAND_DELETED = "land.deleted"

# ─── Communication ───────────────────────────────────────

SUPPORT_CREATED = "support.created"
SUPPORT_UPDATED = "support.updated"
ANNOUNCEMENT_CREATED = "announcement.created"

# ─── Subsidies ───────────────────────────────────────────

SUBSIDY_CREATED = "subsidy.created"
SUBSIDY_APPLIED = "subsidy.applied"
SUBSIDY_REVIEWED = "subsidy.reviewed"

# ─── Real-time channel events (pub/sub, not persisted) ───

SUPPORT_NEW = "support:new"
