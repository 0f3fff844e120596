from enum import Enum


class ItemType(str, Enum):
    FLIGHT = "flight"
    HOTEL = "hotel"
    TRANSPORTATION = "transportation"
    CAR_RENTAL = "car_rental"
    EVENT = "event"


# Enumeration order used when walking a trip's items
ITEM_TYPE_ORDER: list["ItemType"] = [
    ItemType.FLIGHT,
    ItemType.HOTEL,
    ItemType.TRANSPORTATION,
    ItemType.CAR_RENTAL,
    ItemType.EVENT,
]


class CompanionStatus(str, Enum):
    ATTENDING = "attending"
    NOT_ATTENDING = "not_attending"


class PermissionSource(str, Enum):
    OWNER = "owner"
    MANAGE_TRAVEL = "manage_travel"
    EXPLICIT = "explicit"
    INHERITED = "inherited"


class PermissionLevel(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    MANAGE = "manage"


# Boolean column backing each permission level
PERMISSION_FIELDS: dict["PermissionLevel", str] = {
    PermissionLevel.VIEW: "can_view",
    PermissionLevel.EDIT: "can_edit",
    PermissionLevel.MANAGE: "can_manage_companions",
}


class CascadeTrigger(str, Enum):
    ADD_TO_TRIP = "add_to_trip"
    REMOVE_FROM_TRIP = "remove_from_trip"
    PROMOTE_PERMISSIONS = "promote_permissions"
    DEMOTE_PERMISSIONS = "demote_permissions"
