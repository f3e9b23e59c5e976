"""Interfaces of the network-management service as seen by lowpanctl."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from lowpanctl.core.model import Identity, PropertyValue, Provision, ScanResult


class ScanCallback(Protocol):
    def on_result(self, result: ScanResult) -> None:
        """Called once per beacon or energy sample, possibly from another thread."""

    def on_finished(self) -> None:
        """Called exactly once when the scan session ends."""


class Scanner(Protocol):
    def add_channel(self, channel: int) -> None: ...

    def set_callback(self, callback: ScanCallback) -> None: ...

    def start_net_scan(self) -> None: ...

    def start_energy_scan(self) -> None: ...

    def stop_scan(self) -> None:
        """Best-effort request to end a running session."""


class LowpanInterface(Protocol):
    name: str

    def reset(self) -> None: ...

    def attach(self, provision: Provision) -> None: ...

    def join(self, provision: Provision) -> None: ...

    def form(self, provision: Provision) -> None: ...

    def leave(self) -> None: ...

    def set_up(self, up: bool) -> None: ...

    def get_identity(self) -> Identity: ...

    def get_property_keys(self) -> Sequence[str]: ...

    def get_property(self, key: str) -> PropertyValue | None:
        """Fetch one property; raises ServiceRejected if the key is refused."""

    def create_scanner(self) -> Scanner: ...


class LowpanManager(Protocol):
    def get_interface_list(self) -> Sequence[str]: ...

    def get_interface(self, name: str) -> LowpanInterface | None: ...

    def close(self) -> None: ...
