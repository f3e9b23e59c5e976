from __future__ import annotations

import threading
import time

import pytest

from lowpanctl.core.errors import ScanTimeout, ServiceRejected
from lowpanctl.core.model import BeaconInfo, EnergyScanResult, Identity, ScanKind
from lowpanctl.core.scan import ScanCoordinator


class FakeScanner:
    def __init__(self, results=(), *, finish: str = "sync") -> None:
        self.results = list(results)
        self.finish = finish
        self.channels: list[int] = []
        self.callback = None
        self.started: str | None = None
        self.stopped = False
        self.thread: threading.Thread | None = None

    def add_channel(self, channel: int) -> None:
        self.channels.append(channel)

    def set_callback(self, callback) -> None:
        self.callback = callback

    def start_net_scan(self) -> None:
        self._start("net")

    def start_energy_scan(self) -> None:
        self._start("energy")

    def stop_scan(self) -> None:
        self.stopped = True

    def _start(self, kind: str) -> None:
        assert self.callback is not None, "callback must be armed before start"
        self.started = kind
        if self.finish == "sync":
            self._deliver()
        elif self.finish == "thread":
            self.thread = threading.Thread(target=self._deliver)
            self.thread.start()

    def _deliver(self) -> None:
        for result in self.results:
            self.callback.on_result(result)
        self.callback.on_finished()


def _beacon(name: str) -> BeaconInfo:
    return BeaconInfo(identity=Identity(name=name), rssi=-40, lqi=200)


def test_synchronous_finish_before_wait_returns() -> None:
    seen = []
    scanner = FakeScanner([_beacon("a")], finish="sync")
    count = ScanCoordinator(seen.append, timeout_s=5.0).run_scan(scanner, ScanKind.NET, [15, 11, 15])
    assert count == 1
    assert seen == scanner.results
    assert scanner.started == "net"
    assert scanner.channels == [11, 15]


def test_threaded_delivery_keeps_arrival_order() -> None:
    results = [EnergyScanResult(channel=c, max_rssi=-90 + c) for c in (26, 11, 20)]
    seen = []
    scanner = FakeScanner(results, finish="thread")
    count = ScanCoordinator(seen.append, timeout_s=5.0).run_scan(scanner, ScanKind.ENERGY)
    scanner.thread.join()
    assert count == 3
    assert seen == results
    assert scanner.started == "energy"


def test_zero_results_is_not_an_error() -> None:
    seen = []
    assert ScanCoordinator(seen.append, timeout_s=5.0).run_scan(FakeScanner(), ScanKind.NET) == 0
    assert seen == []


def test_missing_finish_times_out_and_stops_scan() -> None:
    scanner = FakeScanner(finish="never")
    started = time.monotonic()
    with pytest.raises(ScanTimeout):
        ScanCoordinator(lambda r: None, timeout_s=0.05).run_scan(scanner, ScanKind.NET)
    assert time.monotonic() - started < 5.0
    assert scanner.stopped


def test_results_after_timeout_are_dropped() -> None:
    seen = []
    scanner = FakeScanner(finish="never")
    with pytest.raises(ScanTimeout):
        ScanCoordinator(seen.append, timeout_s=0.01).run_scan(scanner, ScanKind.NET)

    scanner.callback.on_result(_beacon("late"))
    scanner.callback.on_finished()
    assert seen == []


def test_stop_failure_still_reports_timeout() -> None:
    class RejectingStop(FakeScanner):
        def stop_scan(self) -> None:
            raise ServiceRejected(3, "no scan running")

    with pytest.raises(ScanTimeout):
        ScanCoordinator(lambda r: None, timeout_s=0.01).run_scan(RejectingStop(finish="never"), ScanKind.NET)
