from __future__ import annotations

from sqlalchemy.orm import validates

from ..extensions import db
from ..errors import ImmutableFieldError
from .enums import UserRole, enum_column


class User(db.Model):
    """
    Account record: an admin, a vendor, or a customer.

    A vendor user owns zero or more locations. Deleting a user that still
    owns locations is rejected by the database (RESTRICT); changing the id
    cascades into locations.user_id.

    Role is fixed at creation.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    first_name = db.Column(db.String(45), nullable=False)
    last_name = db.Column(db.String(45), nullable=False)
    email = db.Column(db.String(45), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(enum_column(UserRole, "ck_users_role"), nullable=False)

    @validates("role")
    def _validate_role(self, key, value):
        if self.role is not None and UserRole(value) != self.role:
            raise ImmutableFieldError("User role cannot be changed after creation")
        return value

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "role": self.role.value if self.role else None,
        }
