from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from vendordb.errors import InvalidValueError, ValidationError
from vendordb.time_utils import parse_iso_datetime, to_naive_utc


MAX_LATITUDE = Decimal("90")
MAX_LONGITUDE = Decimal("180")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Which columns a service may write, and which must be present on insert.

    Anything outside writable_fields is rejected, so ids that the database or
    the service assigns (users.id, locations.id, change_log.*) never come from
    callers.
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = field(default_factory=frozenset)


USER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"first_name", "last_name", "email", "role"}),
    required_on_create=frozenset({"first_name", "last_name", "email", "role"}),
)

ITEM_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name"}),
    required_on_create=frozenset({"name"}),
)

LOCATION_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"vendor_name", "availability", "address", "user_id", "lat", "long", "hours", "phone"}),
    required_on_create=frozenset({"availability", "address", "user_id"}),
)

LOCATION_ITEM_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"location_id", "item_id", "availability", "quantity"}),
    required_on_create=frozenset({"location_id", "item_id", "availability", "quantity"}),
)

# "id" is optional: place_order assigns max(id) + 1 when it is None
ORDER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"id", "location_id", "status", "time"}),
    required_on_create=frozenset({"location_id", "status", "time"}),
)

ORDER_ITEM_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"item_id", "order_id", "location_id", "quantity"}),
    required_on_create=frozenset({"item_id", "order_id", "location_id", "quantity"}),
)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    return {c.key: c for c in model.__mapper__.columns}


def _to_enum(col, value):
    enum_class = col.type.enum_class
    try:
        return enum_class(value.strip() if isinstance(value, str) else value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_class)
        raise InvalidValueError(f"{col.key} must be one of: {allowed}")


def _to_int(col, value) -> int:
    # bool is an int subclass; floats and "1e3" / "2.0" strings are rejected
    if isinstance(value, bool):
        raise ValidationError(f"{col.key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    raise ValidationError(f"{col.key} must be an integer")


def _to_decimal(col, value) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{col.key} must be a number")
    try:
        dec = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{col.key} must be a number")
    if not dec.is_finite():
        raise ValidationError(f"{col.key} must be a finite number")
    if col.type.scale is not None:
        dec = dec.quantize(Decimal(1).scaleb(-col.type.scale))
    return dec


def _to_datetime(col, value) -> datetime:
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, str):
        try:
            parsed = parse_iso_datetime(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise ValidationError(f"{col.key} must be an ISO-8601 datetime")


def _coerce_value(col, value: Any):
    coltype = col.type
    # Enum subclasses String, so it is checked first
    if isinstance(coltype, Enum) and coltype.enum_class is not None:
        return _to_enum(col, value)
    if isinstance(coltype, Integer):
        return _to_int(col, value)
    if isinstance(coltype, Numeric):
        return _to_decimal(col, value)
    if isinstance(coltype, DateTime):
        return _to_datetime(col, value)
    if isinstance(coltype, (String, Text)):
        text = str(value).strip()
        if not col.nullable and text == "":
            raise ValidationError(f"{col.key} cannot be blank")
        if getattr(coltype, "length", None) and len(text) > coltype.length:
            raise ValidationError(f"{col.key} exceeds max length {coltype.length}")
        return text
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Check and normalize a write against the model's column metadata.

    - keys must be in policy.writable_fields and be mapped columns
    - partial=False (insert): every required_on_create key must be non-None
    - None is rejected for NOT NULL columns, except primary keys the service fills in
    - values are coerced per column type (enum, integer, numeric, datetime, string)

    Returns the cleaned patch. Raises ValidationError, or InvalidValueError for
    a value outside an enumeration.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)
    patch: dict = {}
    for key, raw in payload.items():
        if key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {key}")
        if key not in cols:
            raise ValidationError(f"Unknown field: {key}")
        col = cols[key]
        if raw is None:
            if not col.nullable and not col.primary_key:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
        else:
            patch[key] = _coerce_value(col, raw)
    return patch


def enforce_rules_location(patch: dict) -> None:
    lat = patch.get("lat")
    if lat is not None and abs(lat) > MAX_LATITUDE:
        raise ValidationError("lat must be between -90 and 90")
    long = patch.get("long")
    if long is not None and abs(long) > MAX_LONGITUDE:
        raise ValidationError("long must be between -180 and 180")


def enforce_rules_location_item(patch: dict) -> None:
    # Stock on hand may be zero but never negative
    if patch.get("quantity") is not None and patch["quantity"] < 0:
        raise ValidationError("quantity must be >= 0")


def enforce_rules_order_item(patch: dict) -> None:
    if patch.get("quantity") is not None and patch["quantity"] <= 0:
        raise ValidationError("quantity must be > 0")
