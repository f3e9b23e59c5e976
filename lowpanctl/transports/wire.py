"""JSON encoding of requests and decoding of replies/events for the daemon."""

from __future__ import annotations

from typing import Any

from lowpanctl.core.errors import ProtocolError
from lowpanctl.core.model import (
    BeaconInfo,
    BoolValue,
    BytesValue,
    EnergyScanResult,
    Identity,
    Int32Value,
    Int64Value,
    IntListValue,
    MasterKey,
    PropertyValue,
    Provision,
    ScanResult,
    StringListValue,
    StringValue,
)


def encode_identity(identity: Identity) -> dict[str, Any]:
    doc: dict[str, Any] = {}
    if identity.name is not None:
        doc["name"] = identity.name
    if identity.panid is not None:
        doc["panid"] = identity.panid
    if identity.channel is not None:
        doc["channel"] = identity.channel
    if identity.xpanid is not None:
        doc["xpanid"] = identity.xpanid.hex()
    return doc


def encode_provision(provision: Provision) -> dict[str, Any]:
    doc: dict[str, Any] = {"identity": encode_identity(provision.identity)}
    if isinstance(provision.credential, MasterKey):
        doc["credential"] = {
            "type": "master_key",
            "key": provision.credential.key.hex(),
            "index": provision.credential.key_index,
        }
    return doc


def _bytes_field(doc: dict[str, Any], field: str) -> bytes | None:
    raw = doc.get(field)
    if raw is None:
        return None
    try:
        return bytes.fromhex(raw)
    except (TypeError, ValueError) as exc:
        raise ProtocolError(f"Field '{field}' is not a hex string: {raw!r}") from exc


def decode_identity(doc: Any) -> Identity:
    if not isinstance(doc, dict):
        raise ProtocolError(f"Identity must be an object, got {doc!r}")
    return Identity(
        name=doc.get("name"),
        panid=doc.get("panid"),
        channel=doc.get("channel"),
        xpanid=_bytes_field(doc, "xpanid"),
    )


def decode_property(doc: Any) -> PropertyValue | None:
    if doc is None:
        return None
    if not isinstance(doc, dict) or "type" not in doc:
        raise ProtocolError(f"Property value must be a typed object, got {doc!r}")

    kind, value = doc["type"], doc.get("value")
    try:
        if kind == "bytes":
            return BytesValue(_bytes_field(doc, "value") or b"")
        if kind == "string_list":
            return StringListValue(tuple(str(v) for v in value or ()))
        if kind == "int_list":
            return IntListValue(tuple(int(v) for v in value or ()))
        if kind == "int32":
            return Int32Value(int(value))
        if kind == "int64":
            return Int64Value(int(value))
        if kind == "string":
            return StringValue(str(value))
        if kind == "bool":
            if not isinstance(value, bool):
                raise ProtocolError(f"Malformed bool property value: {value!r}")
            return BoolValue(value)
    except (TypeError, ValueError) as exc:
        raise ProtocolError(f"Malformed {kind} property value: {value!r}") from exc
    raise ProtocolError(f"Unsupported property type '{kind}'")


def decode_scan_result(kind: str, doc: Any) -> ScanResult:
    if not isinstance(doc, dict):
        raise ProtocolError(f"Scan result must be an object, got {doc!r}")
    try:
        if kind == "beacon":
            return BeaconInfo(
                identity=decode_identity(doc.get("identity", {})),
                rssi=int(doc["rssi"]),
                lqi=int(doc["lqi"]),
                beacon_address=_bytes_field(doc, "address") or b"",
                flags=tuple(doc.get("flags", ())),
            )
        if kind == "energy":
            return EnergyScanResult(channel=int(doc["channel"]), max_rssi=int(doc["max_rssi"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ProtocolError(f"Malformed {kind} scan result: {doc!r}") from exc
    raise ProtocolError(f"Unsupported scan result kind '{kind}'")
