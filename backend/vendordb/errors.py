# Overview: Error taxonomy shared by all services, plus translation of database
# integrity failures into it.

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class VendorDBError(Exception):
    """Base class for every error a service raises to its caller."""


class ValidationError(VendorDBError, ValueError):
    """Input problem: missing/oversized field or quantity out of range."""


class InvalidValueError(ValidationError):
    """Value outside a closed set (role, availability, status, change type)."""


class NotFoundError(VendorDBError):
    """The row being read, updated or deleted does not exist."""


class ReferenceNotFoundError(VendorDBError):
    """Foreign-key violation: the referenced parent row does not exist."""


class RestrictedDeleteError(VendorDBError):
    """Delete rejected because RESTRICT dependents still reference the row."""


class DuplicateKeyError(VendorDBError):
    """Primary or composite key already exists."""


class ImmutableFieldError(VendorDBError):
    """Attempt to change a field that is fixed once set."""


class AuditLogImmutableError(VendorDBError):
    """The change log is append-only."""


_FK_MARKERS = ("foreign key constraint", "a foreign key constraint fails")
_UNIQUE_MARKERS = ("unique constraint", "duplicate entry", "duplicate key", "primary key")
_CHECK_MARKERS = ("check constraint",)


def translate_integrity_error(exc: IntegrityError, operation: str) -> VendorDBError:
    """
    Map an IntegrityError onto the service error taxonomy.

    operation is "insert", "update" or "delete". A foreign-key failure on
    delete means RESTRICT dependents exist; anywhere else it means the
    referenced parent is missing.
    """
    message = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()

    if any(marker in message for marker in _FK_MARKERS):
        if operation == "delete":
            err: VendorDBError = RestrictedDeleteError(
                "Row is still referenced by dependent records"
            )
        else:
            err = ReferenceNotFoundError("Referenced row does not exist")
    elif any(marker in message for marker in _UNIQUE_MARKERS):
        err = DuplicateKeyError("Key already exists")
    elif any(marker in message for marker in _CHECK_MARKERS):
        err = ValidationError(f"Value rejected by check constraint: {exc.orig}")
    else:
        err = ValidationError(f"Integrity error: {exc.orig}")

    logger.warning("Integrity failure during %s: %s -> %s", operation, exc.orig, type(err).__name__)
    return err
