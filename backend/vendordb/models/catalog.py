from __future__ import annotations

from ..extensions import db


class Item(db.Model):
    """
    Global catalog entry shared by all locations.

    Names are not unique. An item cannot be deleted while any location menu,
    order line or change log row references it (RESTRICT).
    """
    __tablename__ = "items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(45), nullable=False)

    def __repr__(self) -> str:
        return f"<Item id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
        }
