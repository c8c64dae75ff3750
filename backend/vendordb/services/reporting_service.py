# Overview: Read-only listings composed from locations, menus, orders and the
# change log. Recomputed on every call; no parameters, no paging.

from __future__ import annotations

from enum import Enum

from vendordb.extensions import db
from vendordb.models import ChangeLog, Item, Location, LocationItem, Order, OrderItem
from vendordb.time_utils import to_utc_z


def _value(member: Enum | None) -> str | None:
    return member.value if member is not None else None


def _float(value) -> float | None:
    return float(value) if value is not None else None


def show_log() -> list[dict]:
    """Every change log row with its location's vendor name, newest first."""
    rows = (
        db.session.query(
            ChangeLog.change_type,
            ChangeLog.time,
            ChangeLog.original_availability,
            ChangeLog.new_availability,
            ChangeLog.original_address,
            ChangeLog.new_address,
            Location.vendor_name,
            ChangeLog.item_id,
        )
        .join(Location, Location.id == ChangeLog.location_id)
        .order_by(ChangeLog.time.desc(), ChangeLog.id.desc())
        .all()
    )
    return [
        {
            "change_type": _value(row.change_type),
            "time": to_utc_z(row.time),
            "original_availability": _value(row.original_availability),
            "new_availability": _value(row.new_availability),
            "original_address": row.original_address,
            "new_address": row.new_address,
            "location": row.vendor_name,
            "item": row.item_id,
        }
        for row in rows
    ]


def show_location() -> list[dict]:
    """All locations, vendor name descending."""
    locations = db.session.query(Location).order_by(Location.vendor_name.desc(), Location.id.asc()).all()
    return [
        {
            "vendor_name": loc.vendor_name,
            "address": loc.address,
            "available": _value(loc.availability),
            "lat": _float(loc.lat),
            "long": _float(loc.long),
            "hours": loc.hours,
            "phone": loc.phone,
        }
        for loc in locations
    ]


def show_order() -> list[dict]:
    """One row per order line, by order id ascending."""
    rows = (
        db.session.query(
            Order.status,
            Order.time,
            Location.vendor_name,
            Item.name,
            OrderItem.quantity,
        )
        .join(Location, Location.id == Order.location_id)
        .join(
            OrderItem,
            (OrderItem.order_id == Order.id) & (OrderItem.location_id == Order.location_id),
        )
        .join(Item, Item.id == OrderItem.item_id)
        .order_by(Order.id.asc(), Order.location_id.asc(), OrderItem.item_id.asc())
        .all()
    )
    return [
        {
            "order_status": _value(row.status),
            "time_received": to_utc_z(row.time),
            "location_name": row.vendor_name,
            "item": row.name,
            "quantity": row.quantity,
        }
        for row in rows
    ]


def show_menu() -> list[dict]:
    """Every menu entry, by vendor name then item name."""
    rows = (
        db.session.query(
            Location.vendor_name,
            Item.name,
            LocationItem.quantity,
            LocationItem.availability,
        )
        .select_from(Location)
        .join(LocationItem, LocationItem.location_id == Location.id)
        .join(Item, Item.id == LocationItem.item_id)
        .order_by(
            Location.vendor_name.asc(),
            Item.name.asc(),
            LocationItem.location_id.asc(),
            LocationItem.item_id.asc(),
        )
        .all()
    )
    return [
        {
            "vendor_name": row.vendor_name,
            "item": row.name,
            "quantity": row.quantity,
            "availability": _value(row.availability),
        }
        for row in rows
    ]


REPORTS = {
    "log": show_log,
    "locations": show_location,
    "orders": show_order,
    "menu": show_menu,
}
