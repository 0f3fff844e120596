"""Domain exceptions for the permission engine."""

from __future__ import annotations


class TripshareError(Exception):
    """Base class for engine errors."""


class ConfigurationError(TripshareError):
    """A caller passed something that can only be a programming defect."""


class UnknownItemTypeError(ConfigurationError):
    def __init__(self, item_type: object):
        self.item_type = item_type
        super().__init__(f"Unknown item type: {item_type}")


class PermissionDeniedError(TripshareError):
    """Raised by the ``require_*`` guards when the actor lacks a permission level."""

    def __init__(self, user_id: object, level: str, target: str):
        self.user_id = user_id
        self.level = level
        self.target = target
        super().__init__(f"User {user_id} lacks {level} permission on {target}")
