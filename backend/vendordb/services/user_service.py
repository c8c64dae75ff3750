# Overview: Service-layer operations for user accounts; encapsulates business logic and database work.

"""
User Service

Accounts are admins, vendors or customers. The role is fixed at creation.
Passwords are hashed with bcrypt; the plain text is never stored.

A user that owns locations cannot be deleted (RESTRICT). Changing a user id
cascades into locations.user_id.
"""

import logging

import bcrypt
from flask import current_app, has_app_context
from sqlalchemy import func, update

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import User
from ..validation import USER_POLICY, validate_payload
from .concurrency import run_in_transaction

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 12


def _bcrypt_rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS))
    return DEFAULT_BCRYPT_ROUNDS


def hash_password(password: str) -> str:
    """Hash password using bcrypt (cost factor from BCRYPT_ROUNDS)."""
    if not password:
        raise ValidationError("Password is required")
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role,
) -> User:
    """
    Create a user account.

    Raises:
        ValidationError: missing/oversized field or empty password
        InvalidValueError: role outside admin/vendor/customer
    """
    patch = validate_payload(
        model=User,
        payload={"first_name": first_name, "last_name": last_name, "email": email, "role": role},
        policy=USER_POLICY,
        partial=False,
    )
    patch["password_hash"] = hash_password(password)

    def _op():
        user = User(**patch)
        db.session.add(user)
        db.session.flush()
        return user

    user = run_in_transaction(_op, operation="insert")
    logger.info("Created user %s (%s)", user.id, user.role.value)
    return user


def get_user(user_id: int) -> User | None:
    return db.session.query(User).filter_by(id=user_id).first()


def find_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.id.asc()).all()


def delete_user(user_id: int) -> None:
    """Delete a user. Raises RestrictedDeleteError while they own locations."""
    def _op():
        user = db.session.query(User).filter_by(id=user_id).first()
        if not user:
            raise NotFoundError("User not found")
        db.session.delete(user)
        db.session.flush()

    run_in_transaction(_op, operation="delete")
    logger.info("Deleted user %s", user_id)


def renumber_user(user_id: int, new_user_id: int) -> User:
    """
    Change a user's primary key.

    Issued as a Core UPDATE so the database cascades the new id into
    locations.user_id.
    """
    def _op():
        if not db.session.query(User).filter_by(id=user_id).first():
            raise NotFoundError("User not found")
        db.session.execute(update(User.__table__).where(User.__table__.c.id == user_id).values(id=new_user_id))

    run_in_transaction(_op, operation="update")
    db.session.expire_all()
    logger.info("Renumbered user %s -> %s", user_id, new_user_id)
    return get_user(new_user_id)
