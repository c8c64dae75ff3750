from __future__ import annotations

import enum

from ..extensions import db


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    VENDOR = "vendor"
    CUSTOMER = "customer"


class Availability(str, enum.Enum):
    YES = "Y"
    NO = "N"


class OrderStatus(str, enum.Enum):
    RECEIVED = "Received"
    FULFILLED = "Fulfilled"


class ChangeType(str, enum.Enum):
    LOCATION_ADD = "LOCATION_ADD"
    LOCATION_AVAILABILITY = "LOCATION_AVAILABILITY"
    LOCATION_ADDRESS = "LOCATION_ADDRESS"
    MENU_AVAILABILITY = "MENU_AVAILABILITY"


def enum_column(enum_cls: type[enum.Enum], name: str) -> db.Enum:
    """
    Column type storing an enum by its value.

    Stored as VARCHAR with a named CHECK constraint so every backend rejects
    values outside the set, not only engines with a native ENUM type.
    """
    return db.Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        length=max(len(m.value) for m in enum_cls),
    )
