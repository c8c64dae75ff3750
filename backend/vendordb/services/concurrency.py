# Overview: Transaction helpers shared by the write services: row locking,
# retry on lock conflicts, and rollback with error translation.

from __future__ import annotations

import time

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import VendorDBError, translate_integrity_error
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for read-modify-write operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def run_in_transaction(func, *, operation: str):
    """
    Run func and commit as one transaction.

    func does its session work without committing. Any service error or
    integrity failure rolls the whole transaction back (including change log
    rows written during the flush) before it reaches the caller.
    """
    def _op():
        try:
            result = func()
            db.session.commit()
            return result
        except IntegrityError as exc:
            db.session.rollback()
            raise translate_integrity_error(exc, operation) from exc
        except VendorDBError:
            db.session.rollback()
            raise

    return run_with_retry(_op)
