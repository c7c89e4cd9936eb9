"""
Badge Descriptors

Closed lookup tables from role, status and margin-tone enums to the badge
(variant, icon, label) a client renders.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class UserRole(str, Enum):
    ROOT = "ROOT"
    SUPER_ADMIN = "SUPER_ADMIN"
    SUB_ADMIN = "SUB_ADMIN"
    MANAGER = "MANAGER"
    SUPPORT = "SUPPORT"


class BadgeVariant(str, Enum):
    DEFAULT = "default"
    SECONDARY = "secondary"
    DESTRUCTIVE = "destructive"
    OUTLINE = "outline"


class ActiveStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MarginTone(str, Enum):
    FAVOURABLE = "favourable"
    UNFAVOURABLE = "unfavourable"


class Perspective(str, Enum):
    """Whose gain a positive figure represents"""
    HOUSE = "house"
    PLAYER = "player"


@dataclass(frozen=True)
class BadgeDescriptor:
    variant: BadgeVariant
    icon: str
    label: str


ROLE_BADGES: Dict[UserRole, BadgeDescriptor] = {
    UserRole.ROOT: BadgeDescriptor(BadgeVariant.DESTRUCTIVE, "crown", "Root"),
    UserRole.SUPER_ADMIN: BadgeDescriptor(BadgeVariant.DEFAULT, "shield", "Super Admin"),
    UserRole.SUB_ADMIN: BadgeDescriptor(BadgeVariant.SECONDARY, "user-check", "Sub Admin"),
    UserRole.MANAGER: BadgeDescriptor(BadgeVariant.OUTLINE, "briefcase", "Manager"),
    UserRole.SUPPORT: BadgeDescriptor(BadgeVariant.OUTLINE, "headphones", "Support"),
}

STATUS_BADGES: Dict[ActiveStatus, BadgeDescriptor] = {
    ActiveStatus.ACTIVE: BadgeDescriptor(BadgeVariant.DEFAULT, "check-circle", "Active"),
    ActiveStatus.INACTIVE: BadgeDescriptor(BadgeVariant.SECONDARY, "x-circle", "Inactive"),
}

TONE_BADGES: Dict[MarginTone, BadgeDescriptor] = {
    MarginTone.FAVOURABLE: BadgeDescriptor(BadgeVariant.DEFAULT, "trending-up", "Favourable"),
    MarginTone.UNFAVOURABLE: BadgeDescriptor(BadgeVariant.DESTRUCTIVE, "trending-down", "Unfavourable"),
}


def parse_role(role: Optional[str]) -> UserRole:
    """Unknown or missing roles are shown as SUPPORT."""
    try:
        return UserRole((role or "").upper())
    except ValueError:
        return UserRole.SUPPORT


def role_badge(role: Optional[str]) -> BadgeDescriptor:
    return ROLE_BADGES[parse_role(role)]


def status_badge(is_active: bool) -> BadgeDescriptor:
    return STATUS_BADGES[ActiveStatus.ACTIVE if is_active else ActiveStatus.INACTIVE]


def margin_tone(margin: float, perspective: Perspective = Perspective.HOUSE) -> MarginTone:
    """
    House figures (GGR, contributors) are favourable at zero or above;
    player figures (winners) are favourable when negative.
    """
    if perspective is Perspective.PLAYER:
        favourable = margin < 0
    else:
        favourable = margin >= 0
    return MarginTone.FAVOURABLE if favourable else MarginTone.UNFAVOURABLE


def trend_icon(margin: float) -> str:
    return "trending-up" if margin >= 0 else "trending-down"
