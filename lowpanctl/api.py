"""Stable public API for building tooling on top of lowpanctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable

from lowpanctl.core.config import Config, load_config
from lowpanctl.core.errors import (
    CommandError,
    ConfigError,
    ConnectionUnavailable,
    CredentialRequired,
    LowpanctlError,
    NoInterfacesPresent,
    ProtocolError,
    ScanTimeout,
    ServiceError,
    ServiceRejected,
    UnknownInterface,
    UnrecognizedArgument,
)
from lowpanctl.core.formatter import error_value, format_property
from lowpanctl.core.model import (
    BeaconInfo,
    EnergyScanResult,
    ErrorValue,
    Identity,
    MasterKey,
    PropertyValue,
    Provision,
    ScanKind,
    ScanResult,
)
from lowpanctl.core.scan import SCAN_TIMEOUT_S, ScanCoordinator
from lowpanctl.transports.base import LowpanInterface, LowpanManager
from lowpanctl.transports.unix_socket import SocketLowpanManager

__all__ = [
    "LowpanctlError",
    "CommandError",
    "ConfigError",
    "ConnectionUnavailable",
    "CredentialRequired",
    "NoInterfacesPresent",
    "ProtocolError",
    "ScanTimeout",
    "ServiceError",
    "ServiceRejected",
    "UnknownInterface",
    "UnrecognizedArgument",
    "BeaconInfo",
    "EnergyScanResult",
    "ErrorValue",
    "Identity",
    "MasterKey",
    "PropertyValue",
    "Provision",
    "Config",
    "Client",
]


class Client:
    """Public client for the LoWPAN management service.

    A `Client` wraps a service connection and exposes interface selection,
    property access, provisioning, and scans as plain method calls that
    return typed values instead of printing.
    """

    def __init__(
        self,
        manager: LowpanManager | None = None,
        *,
        config: Config | None = None,
    ) -> None:
        self._config = config or load_config()
        self._manager = manager or SocketLowpanManager.connect(
            self._config.socket_path,
            timeout_s=self._config.request_timeout_s,
        )

    def close(self) -> None:
        self._manager.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def list_interfaces(self) -> list[str]:
        return list(self._manager.get_interface_list())

    def interface(self, name: str | None = None) -> LowpanInterface:
        name = name or self._config.interface
        if name is None:
            names = self.list_interfaces()
            if not names:
                raise NoInterfacesPresent()
            name = names[0]
        resolved = self._manager.get_interface(name)
        if resolved is None:
            raise UnknownInterface(name)
        return resolved

    def get_property(self, key: str, *, interface: str | None = None) -> PropertyValue | None:
        return self.interface(interface).get_property(key)

    def get_properties(self, *, interface: str | None = None) -> dict[str, PropertyValue | None]:
        """Fetch every property; keys that fail map to ErrorValue."""
        target = self.interface(interface)
        values: dict[str, PropertyValue | None] = {}
        for key in target.get_property_keys():
            try:
                values[key] = target.get_property(key)
            except ConnectionUnavailable:
                raise
            except ServiceError as exc:
                values[key] = error_value(exc)
        return values

    def format_property(self, key: str, value: PropertyValue) -> str:
        return format_property(key, value)

    def form(self, provision: Provision, *, interface: str | None = None) -> None:
        self.interface(interface).form(provision)

    def join(self, provision: Provision, *, interface: str | None = None) -> None:
        if provision.credential is None:
            raise CredentialRequired()
        self.interface(interface).join(provision)

    def attach(self, provision: Provision, *, interface: str | None = None) -> None:
        if provision.credential is None:
            raise CredentialRequired()
        self.interface(interface).attach(provision)

    def net_scan(
        self,
        channels: Iterable[int] = (),
        *,
        interface: str | None = None,
        timeout_s: float = SCAN_TIMEOUT_S,
    ) -> list[BeaconInfo]:
        return [
            r
            for r in self._scan(ScanKind.NET, channels, interface, timeout_s)
            if isinstance(r, BeaconInfo)
        ]

    def energy_scan(
        self,
        channels: Iterable[int] = (),
        *,
        interface: str | None = None,
        timeout_s: float = SCAN_TIMEOUT_S,
    ) -> list[EnergyScanResult]:
        return [
            r
            for r in self._scan(ScanKind.ENERGY, channels, interface, timeout_s)
            if isinstance(r, EnergyScanResult)
        ]

    def _scan(
        self,
        kind: ScanKind,
        channels: Iterable[int],
        interface: str | None,
        timeout_s: float,
    ) -> list[ScanResult]:
        results: list[ScanResult] = []
        scanner = self.interface(interface).create_scanner()
        ScanCoordinator(results.append, timeout_s=timeout_s).run_scan(scanner, kind, channels)
        return results
