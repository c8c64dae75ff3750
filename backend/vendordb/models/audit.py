from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .enums import Availability, ChangeType, enum_column


class ChangeLog(db.Model):
    """
    Change log for locations and location menus.

    IMMUTABLE: Never update or delete. Append-only for audit integrity.
    Rows are written by the audit interceptors inside the flush that
    performs the change, so a change and its log row commit together.

    Both foreign keys RESTRICT deletes: a location or item with history
    cannot be removed.
    """
    __tablename__ = "change_log"
    __table_args__ = (
        db.Index("ix_change_log_time", "time"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    change_type = db.Column(enum_column(ChangeType, "ck_change_log_type"), nullable=False)
    original_availability = db.Column(
        enum_column(Availability, "ck_change_log_original_availability"), nullable=True
    )
    new_availability = db.Column(enum_column(Availability, "ck_change_log_new_availability"), nullable=True)
    time = db.Column(db.DateTime, nullable=False, default=utcnow)
    original_address = db.Column(db.String(45), nullable=True)
    new_address = db.Column(db.String(45), nullable=True)
    location_id = db.Column(
        db.Integer,
        db.ForeignKey("locations.id", name="fk_change_log_location", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id = db.Column(
        db.Integer,
        db.ForeignKey("items.id", name="fk_change_log_item", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=True,
        index=True,
    )

    location = db.relationship("Location", backref=db.backref("change_logs", lazy=True, passive_deletes="all"))
    item = db.relationship("Item", backref=db.backref("change_logs", lazy=True, passive_deletes="all"))

    def __repr__(self) -> str:
        return f"<ChangeLog id={self.id} type={self.change_type} location_id={self.location_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "change_type": self.change_type.value if self.change_type else None,
            "original_availability": self.original_availability.value if self.original_availability else None,
            "new_availability": self.new_availability.value if self.new_availability else None,
            "time": to_utc_z(self.time),
            "original_address": self.original_address,
            "new_address": self.new_address,
            "location_id": self.location_id,
            "item_id": self.item_id,
        }
