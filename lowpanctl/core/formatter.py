"""Render typed property values as display text."""

from __future__ import annotations

from lowpanctl.core.errors import ServiceError, ServiceRejected
from lowpanctl.core.model import (
    KEY_NETWORK_PANID,
    KEY_NETWORK_XPANID,
    KEY_THREAD_RLOC16,
    BoolValue,
    BytesValue,
    ErrorValue,
    Int32Value,
    Int64Value,
    IntListValue,
    PropertyValue,
    StringListValue,
    StringValue,
    hex_upper,
)

_SHORT_ADDRESS_KEYS = frozenset({KEY_NETWORK_PANID, KEY_THREAD_RLOC16})


def _block(rows: list[str]) -> str:
    if not rows:
        return "{ }"
    return "{\n" + "".join(f"\t{row}\n" for row in rows) + "}"


def error_value(exc: ServiceError) -> ErrorValue:
    """Placeholder shown in place of a property the service failed to return."""
    if isinstance(exc, ServiceRejected):
        return ErrorValue(f"ServiceSpecificException: {exc}")
    return ErrorValue(f"{type(exc).__name__}: {exc}")


def format_property(key: str, value: PropertyValue) -> str:
    if isinstance(value, BytesValue):
        return hex_upper(value.value)
    if isinstance(value, StringListValue):
        return _block([f'"{row}"' for row in value.values])
    if isinstance(value, IntListValue):
        return _block([str(row) for row in value.values])
    if isinstance(value, Int64Value):
        if key == KEY_NETWORK_XPANID:
            return f"0x{value.value & 0xFFFFFFFFFFFFFFFF:x}"
        return str(value.value)
    if isinstance(value, Int32Value):
        if key in _SHORT_ADDRESS_KEYS:
            return f"0x{value.value & 0xFFFF:04X}"
        return str(value.value)
    if isinstance(value, BoolValue):
        return "true" if value.value else "false"
    if isinstance(value, StringValue):
        return value.value
    if isinstance(value, ErrorValue):
        return value.description
    return str(value)
