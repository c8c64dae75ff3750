# Overview: Service-layer operations for the shared item catalog.

from __future__ import annotations

import logging

from sqlalchemy import update

from ..errors import NotFoundError
from ..extensions import db
from ..models import Item
from ..validation import ITEM_POLICY, validate_payload
from .concurrency import lock_for_update, run_in_transaction

logger = logging.getLogger(__name__)


def create_item(name: str) -> Item:
    patch = validate_payload(model=Item, payload={"name": name}, policy=ITEM_POLICY, partial=False)

    def _op():
        item = Item(**patch)
        db.session.add(item)
        db.session.flush()
        return item

    item = run_in_transaction(_op, operation="insert")
    logger.info("Created item %s (%s)", item.id, item.name)
    return item


def rename_item(item_id: int, name: str) -> Item:
    patch = validate_payload(model=Item, payload={"name": name}, policy=ITEM_POLICY, partial=False)

    def _op():
        item = lock_for_update(db.session.query(Item).filter_by(id=item_id)).first()
        if not item:
            raise NotFoundError("Item not found")
        item.name = patch["name"]
        return item

    return run_in_transaction(_op, operation="update")


def get_item(item_id: int) -> Item | None:
    return db.session.query(Item).filter_by(id=item_id).first()


def list_items() -> list[Item]:
    return db.session.query(Item).order_by(Item.name.asc(), Item.id.asc()).all()


def delete_item(item_id: int) -> None:
    """
    Remove an item from the catalog.

    Raises RestrictedDeleteError while any menu entry, order line or change
    log row references it.
    """
    def _op():
        item = db.session.query(Item).filter_by(id=item_id).first()
        if not item:
            raise NotFoundError("Item not found")
        db.session.delete(item)
        db.session.flush()

    run_in_transaction(_op, operation="delete")
    logger.info("Deleted item %s", item_id)


def renumber_item(item_id: int, new_item_id: int) -> Item:
    """Change an item's primary key; the database cascades it into every reference."""
    def _op():
        if not db.session.query(Item).filter_by(id=item_id).first():
            raise NotFoundError("Item not found")
        db.session.execute(update(Item.__table__).where(Item.__table__.c.id == item_id).values(id=new_item_id))

    run_in_transaction(_op, operation="update")
    db.session.expire_all()
    logger.info("Renumbered item %s -> %s", item_id, new_item_id)
    return get_item(new_item_id)
