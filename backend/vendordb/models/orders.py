from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import OrderStatus, enum_column


class Order(db.Model):
    """
    Customer order received by one location.

    Keyed by (id, location_id); order_items reference the full composite.
    The id is not autoincremented by the database (composite keys cannot be
    on SQLite); order_service assigns max(id) + 1.
    """
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    location_id = db.Column(
        db.Integer,
        db.ForeignKey("locations.id", name="fk_orders_location", ondelete="RESTRICT", onupdate="CASCADE"),
        primary_key=True,
        index=True,
    )
    status = db.Column(enum_column(OrderStatus, "ck_orders_status"), nullable=False)
    time = db.Column(db.DateTime, nullable=False)

    location = db.relationship("Location", backref=db.backref("orders", lazy=True, passive_deletes="all"))
    order_items = db.relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} location_id={self.location_id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "location_id": self.location_id,
            "status": self.status.value if self.status else None,
            "time": to_utc_z(self.time),
            "lines": [line.to_dict() for line in self.order_items],
        }


class OrderItem(db.Model):
    __tablename__ = "order_items"
    __table_args__ = (
        db.ForeignKeyConstraint(
            ["order_id", "location_id"],
            ["orders.id", "orders.location_id"],
            name="fk_order_items_order",
            ondelete="CASCADE",
            onupdate="CASCADE",
        ),
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity"),
        db.Index("ix_order_items_order", "order_id", "location_id"),
    )

    item_id = db.Column(
        db.Integer,
        db.ForeignKey("items.id", name="fk_order_items_item", ondelete="RESTRICT", onupdate="CASCADE"),
        primary_key=True,
    )
    order_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    location_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    quantity = db.Column(db.Integer, nullable=False)

    order = db.relationship("Order", back_populates="order_items")
    item = db.relationship("Item", backref=db.backref("order_items", lazy=True, passive_deletes="all"))

    def __repr__(self) -> str:
        return f"<OrderItem order_id={self.order_id} item_id={self.item_id} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "order_id": self.order_id,
            "location_id": self.location_id,
            "quantity": self.quantity,
        }
