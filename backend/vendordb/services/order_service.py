# Overview: Service-layer operations for customer orders and their lines.

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy import func

from ..errors import DuplicateKeyError, NotFoundError, ReferenceNotFoundError, ValidationError
from ..extensions import db
from ..models import Item, Location, Order, OrderItem, OrderStatus
from ..time_utils import utcnow
from ..validation import ORDER_ITEM_POLICY, ORDER_POLICY, enforce_rules_order_item, validate_payload
from .concurrency import lock_for_update, run_in_transaction

logger = logging.getLogger(__name__)


def _normalize_line(line) -> dict:
    """Accept (item_id, quantity) pairs or {"item_id": ..., "quantity": ...} dicts."""
    if isinstance(line, dict):
        return {"item_id": line.get("item_id"), "quantity": line.get("quantity")}
    try:
        item_id, quantity = line
    except (TypeError, ValueError):
        raise ValidationError("Order lines must be (item_id, quantity) pairs")
    return {"item_id": item_id, "quantity": quantity}


def _next_order_id() -> int:
    return (db.session.query(func.max(Order.id)).scalar() or 0) + 1


def _validated_line(order_id: int, location_id: int, line: dict) -> dict:
    patch = validate_payload(
        model=OrderItem,
        payload={"order_id": order_id, "location_id": location_id, **line},
        policy=ORDER_ITEM_POLICY,
        partial=False,
    )
    enforce_rules_order_item(patch)
    return patch


def place_order(
    *,
    location_id: int,
    lines: Iterable = (),
    status=OrderStatus.RECEIVED,
    time: datetime | str | None = None,
    order_id: int | None = None,
) -> Order:
    """
    Record an order received by a location, with its lines.

    The order id is max(id) + 1 across all orders unless one is given.

    Raises:
        ReferenceNotFoundError: location or a line's item does not exist
        DuplicateKeyError: (order_id, location_id) exists, or an item repeats
        ValidationError / InvalidValueError: bad status, time or quantity
    """
    patch = validate_payload(
        model=Order,
        payload={"id": order_id, "location_id": location_id, "status": status, "time": time or utcnow()},
        policy=ORDER_POLICY,
        partial=False,
    )
    raw_lines = [_normalize_line(line) for line in lines]

    def _op():
        if not db.session.query(Location).filter_by(id=patch["location_id"]).first():
            raise ReferenceNotFoundError("Location not found")

        new_id = patch["id"] if patch.get("id") is not None else _next_order_id()
        if db.session.get(Order, (new_id, patch["location_id"])):
            raise DuplicateKeyError(f"Order {new_id} already exists for location {patch['location_id']}")

        order = Order(id=new_id, location_id=patch["location_id"], status=patch["status"], time=patch["time"])
        db.session.add(order)

        seen: set[int] = set()
        for raw in raw_lines:
            line = _validated_line(new_id, patch["location_id"], raw)
            if line["item_id"] in seen:
                raise DuplicateKeyError(f"Item {line['item_id']} appears more than once in the order")
            seen.add(line["item_id"])
            if not db.session.query(Item).filter_by(id=line["item_id"]).first():
                raise ReferenceNotFoundError(f"Item {line['item_id']} not found")
            order.order_items.append(OrderItem(item_id=line["item_id"], quantity=line["quantity"]))

        db.session.flush()
        return order

    order = run_in_transaction(_op, operation="insert")
    logger.info("Placed order %s at location %s with %d line(s)", order.id, order.location_id, len(raw_lines))
    return order


def add_order_line(*, order_id: int, location_id: int, item_id: int, quantity: int) -> OrderItem:
    line = _validated_line(order_id, location_id, {"item_id": item_id, "quantity": quantity})

    def _op():
        if not db.session.get(Order, (order_id, location_id)):
            raise ReferenceNotFoundError("Order not found")
        if not db.session.query(Item).filter_by(id=item_id).first():
            raise ReferenceNotFoundError("Item not found")
        if db.session.get(OrderItem, (item_id, order_id, location_id)):
            raise DuplicateKeyError("Item is already on this order")
        order_item = OrderItem(**line)
        db.session.add(order_item)
        db.session.flush()
        return order_item

    return run_in_transaction(_op, operation="insert")


def set_order_status(order_id: int, location_id: int, status) -> Order:
    patch = validate_payload(model=Order, payload={"status": status}, policy=ORDER_POLICY, partial=True)

    def _op():
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id, location_id=location_id)).first()
        if not order:
            raise NotFoundError("Order not found")
        order.status = patch["status"]
        return order

    order = run_in_transaction(_op, operation="update")
    logger.info("Order %s at location %s is now %s", order_id, location_id, order.status.value)
    return order


def get_order(order_id: int, location_id: int) -> Order | None:
    return db.session.query(Order).filter_by(id=order_id, location_id=location_id).first()


def list_orders(location_id: int | None = None) -> list[Order]:
    query = db.session.query(Order)
    if location_id is not None:
        query = query.filter(Order.location_id == location_id)
    return query.order_by(Order.id.asc(), Order.location_id.asc()).all()


def delete_order(order_id: int, location_id: int) -> None:
    """Delete an order; its lines go with it, the items stay in the catalog."""
    def _op():
        order = db.session.query(Order).filter_by(id=order_id, location_id=location_id).first()
        if not order:
            raise NotFoundError("Order not found")
        db.session.delete(order)
        db.session.flush()

    run_in_transaction(_op, operation="delete")
    logger.info("Deleted order %s at location %s", order_id, location_id)
