"""Bridge the callback-driven scanner API to a bounded blocking wait."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable

from lowpanctl.core.errors import ScanTimeout, ServiceError
from lowpanctl.core.model import ScanKind, ScanResult
from lowpanctl.transports.base import Scanner

SCAN_TIMEOUT_S = 60.0
LOGGER = logging.getLogger(__name__)


class _ScanSession:
    """Callback target for one scan session.

    ``on_result`` runs on the service's delivery thread. Results are emitted
    under a lock so output stays in delivery order, and are dropped once the
    waiter has given up.
    """

    def __init__(self, emit: Callable[[ScanResult], None], lock: threading.Lock) -> None:
        self._emit = emit
        self._lock = lock
        self._finished = threading.Event()
        self._abandoned = False
        self.count = 0

    def on_result(self, result: ScanResult) -> None:
        with self._lock:
            if self._abandoned:
                LOGGER.debug("Dropping scan result delivered after timeout: %s", result)
                return
            self.count += 1
            self._emit(result)

    def on_finished(self) -> None:
        self._finished.set()

    def wait(self, timeout_s: float) -> bool:
        if self._finished.wait(timeout_s):
            return True
        with self._lock:
            # on_finished may have landed between the wait expiring and here.
            if self._finished.is_set():
                return True
            self._abandoned = True
        return False


class ScanCoordinator:
    def __init__(
        self,
        emit: Callable[[ScanResult], None],
        *,
        timeout_s: float = SCAN_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
        lock: threading.Lock | None = None,
    ) -> None:
        self._emit = emit
        self._timeout_s = timeout_s
        self._clock = clock
        self._lock = lock or threading.Lock()

    def run_scan(self, scanner: Scanner, kind: ScanKind, channels: Iterable[int] = ()) -> int:
        """Run one scan session to completion and return the number of results.

        Raises ScanTimeout if the session does not finish within the timeout.
        """
        for channel in sorted(set(channels)):
            scanner.add_channel(channel)

        session = _ScanSession(self._emit, self._lock)
        scanner.set_callback(session)

        started = self._clock()
        if kind is ScanKind.NET:
            scanner.start_net_scan()
        else:
            scanner.start_energy_scan()

        if session.wait(self._timeout_s):
            LOGGER.debug(
                "%s scan finished with %d result(s) in %.2fs",
                kind.value,
                session.count,
                self._clock() - started,
            )
            return session.count

        LOGGER.warning("%s scan did not finish within %.1fs", kind.value, self._timeout_s)
        try:
            scanner.stop_scan()
        except ServiceError as exc:
            LOGGER.warning("Could not stop abandoned scan: %s", exc)
        raise ScanTimeout()
