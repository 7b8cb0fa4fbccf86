from bidtracker.models.bid import Bid
from bidtracker.models.audit import AuditEvent, AuditChange
from bidtracker.models.user import User
from bidtracker.models.branding import AppBranding

__all__ = ["Bid", "AuditEvent", "AuditChange", "User", "AppBranding"]
