# Overview: Service-layer operations for vendor locations and their menus.

"""
Location Service

Locations belong to exactly one user. Each location carries a menu of
catalog items (LocationItem rows) with availability and stock.

Change log rows are not written here: the audit interceptors in
audit_service.py append them during the same flush, for
- a new location (LOCATION_ADD)
- a location availability change (LOCATION_AVAILABILITY)
- a location address change (LOCATION_ADDRESS)
- a menu availability change (MENU_AVAILABILITY)

Delete rules enforced by the database:
- a location with orders or change log history cannot be deleted
- deleting a location removes its menu rows
"""

from __future__ import annotations

import logging

from sqlalchemy import update

from ..errors import DuplicateKeyError, NotFoundError, ReferenceNotFoundError
from ..extensions import db
from ..models import Item, Location, LocationItem, User
from ..validation import (
    LOCATION_ITEM_POLICY,
    LOCATION_POLICY,
    enforce_rules_location,
    enforce_rules_location_item,
    validate_payload,
)
from .audit_service import apply_update
from .concurrency import lock_for_update, run_in_transaction

logger = logging.getLogger(__name__)


def register_location(
    *,
    user_id: int,
    address: str,
    availability="Y",
    vendor_name: str | None = None,
    lat=None,
    long=None,
    hours: str | None = None,
    phone: str | None = None,
) -> Location:
    """
    Register a storefront for an existing user.

    Raises:
        ReferenceNotFoundError: user_id does not exist
        ValidationError / InvalidValueError: bad field values
    """
    patch = validate_payload(
        model=Location,
        payload={
            "user_id": user_id,
            "address": address,
            "availability": availability,
            "vendor_name": vendor_name,
            "lat": lat,
            "long": long,
            "hours": hours,
            "phone": phone,
        },
        policy=LOCATION_POLICY,
        partial=False,
    )
    enforce_rules_location(patch)

    def _op():
        if not db.session.query(User).filter_by(id=patch["user_id"]).first():
            raise ReferenceNotFoundError("User not found")
        location = Location(**patch)
        db.session.add(location)
        db.session.flush()
        return location

    location = run_in_transaction(_op, operation="insert")
    logger.info("Registered location %s (%s)", location.id, location.vendor_name)
    return location


# Marks an update_location argument that was not passed; None clears a column.
_UNSET = object()


def update_location(
    location_id: int,
    *,
    vendor_name=_UNSET,
    availability=_UNSET,
    address=_UNSET,
    user_id=_UNSET,
    lat=_UNSET,
    long=_UNSET,
    hours=_UNSET,
    phone=_UNSET,
) -> Location:
    """
    Update the fields that are passed; omitted fields stay as they are.

    Passing None clears a nullable column (vendor_name, lat, long, hours,
    phone). None for availability, address or user_id raises ValidationError.
    """
    payload = {
        key: value
        for key, value in {
            "vendor_name": vendor_name,
            "availability": availability,
            "address": address,
            "user_id": user_id,
            "lat": lat,
            "long": long,
            "hours": hours,
            "phone": phone,
        }.items()
        if value is not _UNSET
    }
    patch = validate_payload(model=Location, payload=payload, policy=LOCATION_POLICY, partial=True)
    enforce_rules_location(patch)

    def _op():
        location = lock_for_update(db.session.query(Location).filter_by(id=location_id)).first()
        if not location:
            raise NotFoundError("Location not found")
        if "user_id" in patch and not db.session.query(User).filter_by(id=patch["user_id"]).first():
            raise ReferenceNotFoundError("User not found")
        apply_update(location, patch)
        db.session.flush()
        return location

    location = run_in_transaction(_op, operation="update")
    logger.info("Updated location %s: %s", location_id, ", ".join(sorted(patch)) or "no changes")
    return location


def set_location_availability(location_id: int, availability) -> Location:
    return update_location(location_id, availability=availability)


def change_location_address(location_id: int, address: str) -> Location:
    return update_location(location_id, address=address)


def get_location(location_id: int) -> Location | None:
    return db.session.query(Location).filter_by(id=location_id).first()


def list_locations() -> list[Location]:
    return db.session.query(Location).order_by(Location.id.asc()).all()


def delete_location(location_id: int) -> None:
    """
    Delete a location and its menu rows.

    Raises RestrictedDeleteError while orders or change log rows reference it.
    """
    def _op():
        location = db.session.query(Location).filter_by(id=location_id).first()
        if not location:
            raise NotFoundError("Location not found")
        db.session.delete(location)
        db.session.flush()

    run_in_transaction(_op, operation="delete")
    logger.info("Deleted location %s", location_id)


def renumber_location(location_id: int, new_location_id: int) -> Location:
    """
    Change a location's primary key.

    Core UPDATE: the database cascades the new id into menu rows, orders,
    order lines and change log rows. No change log row is written for it.
    """
    def _op():
        if not db.session.query(Location).filter_by(id=location_id).first():
            raise NotFoundError("Location not found")
        db.session.execute(
            update(Location.__table__)
            .where(Location.__table__.c.id == location_id)
            .values(id=new_location_id)
        )

    run_in_transaction(_op, operation="update")
    db.session.expire_all()
    logger.info("Renumbered location %s -> %s", location_id, new_location_id)
    return get_location(new_location_id)


def add_menu_item(*, location_id: int, item_id: int, availability="Y", quantity: int = 0) -> LocationItem:
    """
    Put a catalog item on a location's menu.

    Raises:
        ReferenceNotFoundError: location or item does not exist
        DuplicateKeyError: the item is already on this menu
        ValidationError: negative quantity
    """
    patch = validate_payload(
        model=LocationItem,
        payload={"location_id": location_id, "item_id": item_id, "availability": availability, "quantity": quantity},
        policy=LOCATION_ITEM_POLICY,
        partial=False,
    )
    enforce_rules_location_item(patch)

    def _op():
        if not db.session.query(Location).filter_by(id=patch["location_id"]).first():
            raise ReferenceNotFoundError("Location not found")
        if not db.session.query(Item).filter_by(id=patch["item_id"]).first():
            raise ReferenceNotFoundError("Item not found")
        if db.session.get(LocationItem, (patch["location_id"], patch["item_id"])):
            raise DuplicateKeyError("Item is already on this location's menu")
        menu_item = LocationItem(**patch)
        db.session.add(menu_item)
        db.session.flush()
        return menu_item

    menu_item = run_in_transaction(_op, operation="insert")
    logger.info("Added item %s to location %s menu", item_id, location_id)
    return menu_item


def _update_menu_item(location_id: int, item_id: int, patch: dict) -> LocationItem:
    def _op():
        menu_item = lock_for_update(
            db.session.query(LocationItem).filter_by(location_id=location_id, item_id=item_id)
        ).first()
        if not menu_item:
            raise NotFoundError("Menu item not found")
        apply_update(menu_item, patch)
        db.session.flush()
        return menu_item

    return run_in_transaction(_op, operation="update")


def set_menu_availability(location_id: int, item_id: int, availability) -> LocationItem:
    patch = validate_payload(
        model=LocationItem,
        payload={"availability": availability},
        policy=LOCATION_ITEM_POLICY,
        partial=True,
    )
    return _update_menu_item(location_id, item_id, patch)


def set_menu_quantity(location_id: int, item_id: int, quantity: int) -> LocationItem:
    patch = validate_payload(
        model=LocationItem,
        payload={"quantity": quantity},
        policy=LOCATION_ITEM_POLICY,
        partial=True,
    )
    enforce_rules_location_item(patch)
    return _update_menu_item(location_id, item_id, patch)


def get_menu_item(location_id: int, item_id: int) -> LocationItem | None:
    return db.session.query(LocationItem).filter_by(location_id=location_id, item_id=item_id).first()


def list_menu(location_id: int) -> list[LocationItem]:
    return (
        db.session.query(LocationItem)
        .filter_by(location_id=location_id)
        .order_by(LocationItem.item_id.asc())
        .all()
    )


def remove_menu_item(location_id: int, item_id: int) -> None:
    def _op():
        menu_item = db.session.query(LocationItem).filter_by(location_id=location_id, item_id=item_id).first()
        if not menu_item:
            raise NotFoundError("Menu item not found")
        db.session.delete(menu_item)
        db.session.flush()

    run_in_transaction(_op, operation="delete")
    logger.info("Removed item %s from location %s menu", item_id, location_id)
