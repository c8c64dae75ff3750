# Overview: Change-log interceptors for locations and location menus, plus
# read access to the log.

from __future__ import annotations

import logging

from flask import current_app, has_app_context
from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import flag_modified

from ..errors import AuditLogImmutableError
from ..extensions import db
from ..models import Availability, ChangeLog, ChangeType, Location, LocationItem
from ..time_utils import utcnow

"""
Change Log Invariants (authoritative)

- Append-only: ORM updates and deletes of ChangeLog rows raise.
- Rows are inserted on the flush connection of the change they record, so a
  change and its log row commit or roll back together.
- Only four events are logged: location insert, location availability
  change, location address change, location item availability change.
- By default a row is written only when the logged column actually changed.
  AUDIT_LOG_EVERY_UPDATE=True writes the location rows (and the menu row) for
  every UPDATE of the parent row, changed or not.
- Core UPDATE statements (bulk renumbering) do not pass through here.
"""

logger = logging.getLogger(__name__)


def _log_every_update() -> bool:
    if has_app_context():
        return bool(current_app.config.get("AUDIT_LOG_EVERY_UPDATE", False))
    return False


def _old_and_new(target, key: str) -> tuple[object, object, bool]:
    """(old value, new value, changed) for a column attribute during flush."""
    history = inspect(target).attrs[key].history
    new = getattr(target, key)
    if not history.has_changes():
        return new, new, False
    # flagged by apply_update: written back with the value it already had
    old = history.deleted[0] if history.deleted else new
    return old, new, old != new


def _row_was_updated(target) -> bool:
    # after_update also fires for dirty instances with no net column change;
    # attributes flagged by apply_update count as updated
    state = inspect(target)
    return any(state.attrs[prop.key].history.has_changes() for prop in state.mapper.column_attrs)


def apply_update(target, patch: dict) -> None:
    """
    Assign patch values to a loaded row.

    With AUDIT_LOG_EVERY_UPDATE on, a value equal to the current one is
    flagged as modified instead, so the flush still issues the UPDATE and the
    interceptors log it, as a SQL UPDATE writing the same value would.
    """
    every_update = _log_every_update()
    for key, value in patch.items():
        if every_update and getattr(target, key) == value:
            flag_modified(target, key)
        else:
            setattr(target, key, value)


def _append(connection, *, change_type: ChangeType, location_id: int, item_id: int | None = None,
            original_availability: Availability | None = None, new_availability: Availability | None = None,
            original_address: str | None = None, new_address: str | None = None) -> None:
    connection.execute(
        ChangeLog.__table__.insert().values(
            change_type=change_type,
            original_availability=original_availability,
            new_availability=new_availability,
            time=utcnow(),
            original_address=original_address,
            new_address=new_address,
            location_id=location_id,
            item_id=item_id,
        )
    )
    logger.debug("change_log %s location=%s item=%s", change_type.value, location_id, item_id)


@event.listens_for(Location, "after_insert")
def _log_location_add(mapper, connection, target: Location) -> None:
    _append(
        connection,
        change_type=ChangeType.LOCATION_ADD,
        location_id=target.id,
        new_availability=target.availability,
        new_address=target.address,
    )


@event.listens_for(Location, "after_update")
def _log_location_update(mapper, connection, target: Location) -> None:
    every_update = _log_every_update()
    if every_update and not _row_was_updated(target):
        return

    old_availability, new_availability, availability_changed = _old_and_new(target, "availability")
    if availability_changed or every_update:
        _append(
            connection,
            change_type=ChangeType.LOCATION_AVAILABILITY,
            location_id=target.id,
            original_availability=old_availability,
            new_availability=new_availability,
        )

    old_address, new_address, address_changed = _old_and_new(target, "address")
    if address_changed or every_update:
        _append(
            connection,
            change_type=ChangeType.LOCATION_ADDRESS,
            location_id=target.id,
            original_address=old_address,
            new_address=new_address,
        )


@event.listens_for(LocationItem, "after_update")
def _log_menu_availability(mapper, connection, target: LocationItem) -> None:
    every_update = _log_every_update()
    if every_update and not _row_was_updated(target):
        return

    old_availability, new_availability, changed = _old_and_new(target, "availability")
    if changed or every_update:
        _append(
            connection,
            change_type=ChangeType.MENU_AVAILABILITY,
            location_id=target.location_id,
            item_id=target.item_id,
            original_availability=old_availability,
            new_availability=new_availability,
        )


@event.listens_for(ChangeLog, "before_update")
def _reject_log_update(mapper, connection, target: ChangeLog) -> None:
    raise AuditLogImmutableError(f"Change log entry {target.id} cannot be modified")


@event.listens_for(ChangeLog, "before_delete")
def _reject_log_delete(mapper, connection, target: ChangeLog) -> None:
    raise AuditLogImmutableError(f"Change log entry {target.id} cannot be deleted")


def list_changes(location_id: int | None = None) -> list[ChangeLog]:
    """Log rows in insertion order, optionally for one location."""
    query = db.session.query(ChangeLog)
    if location_id is not None:
        query = query.filter(ChangeLog.location_id == location_id)
    return query.order_by(ChangeLog.id.asc()).all()
