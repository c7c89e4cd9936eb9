"""
Display descriptors for presentation clients
"""
from .badges import (
    BadgeDescriptor,
    MarginTone,
    Perspective,
    UserRole,
    margin_tone,
    role_badge,
    status_badge,
)

__all__ = [
    "BadgeDescriptor",
    "MarginTone",
    "Perspective",
    "UserRole",
    "margin_tone",
    "role_badge",
    "status_badge",
]
