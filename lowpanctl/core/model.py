"""Core data models shared by the parser, formatter, scanner, and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

KEY_INTERFACE_ENABLED = "Interface:Enabled"
KEY_INTERFACE_STATE = "Interface:State"
KEY_NETWORK_PANID = "Network:PANID"
KEY_NETWORK_XPANID = "Network:XPANID"
KEY_THREAD_RLOC16 = "Thread:RLOC16"

STATUS_KEYS: tuple[str, ...] = (
    KEY_INTERFACE_ENABLED,
    KEY_INTERFACE_STATE,
    "org.wpantund.Daemon:Version",
    "org.wpantund.NCP:Version",
    "org.wpantund.Config:NCP:DriverName",
    "org.wpantund.IPv6:LinkLocalAddress",
    "org.wpantund.IPv6:MeshLocalAddress",
)

DEFAULT_KEY_INDEX = 1


def hex_upper(data: bytes) -> str:
    return data.hex().upper()


@dataclass(frozen=True, eq=False)
class Identity:
    name: str | None = None
    panid: int | None = None
    channel: int | None = None
    xpanid: bytes | None = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.name is not None:
            parts.append(f"Name:{self.name}")
        if self.xpanid:
            parts.append(f"XPANID:{hex_upper(self.xpanid)}")
        if self.panid is not None:
            parts.append(f"PANID:0x{self.panid & 0xFFFF:04X}")
        if self.channel is not None:
            parts.append(f"Channel:{self.channel}")
        return ", ".join(parts)


@dataclass(frozen=True)
class MasterKey:
    key: bytes
    key_index: int = DEFAULT_KEY_INDEX


# Only master keys exist today; widen this union when new credential types appear.
Credential = MasterKey


@dataclass(frozen=True)
class Provision:
    identity: Identity
    credential: Credential | None = None


@dataclass(frozen=True)
class BytesValue:
    value: bytes


@dataclass(frozen=True)
class StringListValue:
    values: tuple[str, ...]


@dataclass(frozen=True)
class IntListValue:
    values: tuple[int, ...]


@dataclass(frozen=True)
class Int32Value:
    value: int


@dataclass(frozen=True)
class Int64Value:
    value: int


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class ErrorValue:
    """Stands in for a property whose fetch failed during a bulk listing."""

    description: str


PropertyValue = Union[
    BytesValue,
    StringListValue,
    IntListValue,
    Int32Value,
    Int64Value,
    StringValue,
    BoolValue,
    ErrorValue,
]


@dataclass(frozen=True)
class BeaconInfo:
    identity: Identity
    rssi: int
    lqi: int
    beacon_address: bytes = b""
    flags: tuple[str, ...] = ()

    def __str__(self) -> str:
        text = f"{self.identity}, RSSI:{self.rssi}dBm, LQI:{self.lqi}"
        if self.beacon_address:
            text += f", BeaconAddress:{hex_upper(self.beacon_address)}"
        for flag in self.flags:
            text += f", {flag}"
        return text


@dataclass(frozen=True)
class EnergyScanResult:
    channel: int
    max_rssi: int

    def __str__(self) -> str:
        return f"Channel: {self.channel}, MaxRssi: {self.max_rssi}"


ScanResult = Union[BeaconInfo, EnergyScanResult]


class ScanKind(enum.Enum):
    NET = "net"
    ENERGY = "energy"
