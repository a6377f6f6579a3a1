"""Content guard module."""

from guider.guard.content_guard import ContentGuard, GuardVerdict, VerdictKind

__all__ = [
    "ContentGuard",
    "GuardVerdict",
    "VerdictKind",
]
