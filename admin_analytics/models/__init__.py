"""Models package placeholder."""

__all__ = [
    "base",
    "admin",
    "session",
    "audit",
    "security",
    "analytics",
]
