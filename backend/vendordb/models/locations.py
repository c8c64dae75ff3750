from __future__ import annotations

from sqlalchemy.orm import column_property

from ..extensions import db
from .enums import Availability, enum_column


def _coord(value) -> float | None:
    return float(value) if value is not None else None


class Location(db.Model):
    """
    A vendor storefront, owned by exactly one user.

    Referential rules:
    - user_id -> users.id: RESTRICT on delete, CASCADE on update
    - location_items die with the location (CASCADE)
    - orders and change log rows block deletion (RESTRICT)

    Inserts and availability/address updates are written to the change log
    by the audit interceptors (see services/audit_service.py).
    """
    __tablename__ = "locations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    vendor_name = db.Column(db.String(45), nullable=True)
    # active_history: the old value must be loaded before a set so the audit
    # interceptor can log it, even when the instance was expired by a commit.
    availability = column_property(
        db.Column(enum_column(Availability, "ck_locations_availability"), nullable=False),
        active_history=True,
    )
    address = column_property(db.Column(db.String(45), nullable=False), active_history=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", name="fk_locations_user", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    lat = db.Column(db.Numeric(10, 8), nullable=True)
    long = db.Column(db.Numeric(11, 8), nullable=True)
    hours = db.Column(db.String(45), nullable=True)
    phone = db.Column(db.String(45), nullable=True)

    user = db.relationship("User", backref=db.backref("locations", lazy=True, passive_deletes="all"))
    location_items = db.relationship(
        "LocationItem",
        back_populates="location",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Location id={self.id} vendor_name={self.vendor_name!r} user_id={self.user_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vendor_name": self.vendor_name,
            "availability": self.availability.value if self.availability else None,
            "address": self.address,
            "user_id": self.user_id,
            "lat": _coord(self.lat),
            "long": _coord(self.long),
            "hours": self.hours,
            "phone": self.phone,
        }


class LocationItem(db.Model):
    """Per-location availability and stock of a catalog item."""
    __tablename__ = "location_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_location_items_quantity"),
    )

    location_id = db.Column(
        db.Integer,
        db.ForeignKey("locations.id", name="fk_location_items_location", ondelete="CASCADE", onupdate="CASCADE"),
        primary_key=True,
    )
    item_id = db.Column(
        db.Integer,
        db.ForeignKey("items.id", name="fk_location_items_item", ondelete="RESTRICT", onupdate="CASCADE"),
        primary_key=True,
        index=True,
    )
    availability = column_property(
        db.Column(enum_column(Availability, "ck_location_items_availability"), nullable=False),
        active_history=True,
    )
    quantity = db.Column(db.Integer, nullable=False)

    location = db.relationship("Location", back_populates="location_items")
    item = db.relationship("Item", backref=db.backref("location_items", lazy=True, passive_deletes="all"))

    def __repr__(self) -> str:
        return f"<LocationItem location_id={self.location_id} item_id={self.item_id} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "location_id": self.location_id,
            "item_id": self.item_id,
            "availability": self.availability.value if self.availability else None,
            "quantity": self.quantity,
        }
