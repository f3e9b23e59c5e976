"""Management-daemon client speaking newline-delimited JSON over a UNIX socket."""

from __future__ import annotations

import itertools
import json
import logging
import queue
import socket
import threading
from typing import Any

from lowpanctl.core.errors import ConnectionUnavailable, ProtocolError, ServiceRejected
from lowpanctl.core.model import Identity, PropertyValue, Provision
from lowpanctl.transports.base import ScanCallback
from lowpanctl.transports.wire import decode_identity, decode_property, decode_scan_result, encode_provision

LOGGER = logging.getLogger(__name__)
_CLOSED = object()


class SocketConnection:
    """One connection to the daemon.

    A reader thread owns the receive side: replies go to the single in-flight
    call, scan events go to the callback registered for their scanner id.
    """

    def __init__(self, path: str, *, timeout_s: float = 5.0) -> None:
        self.path = path
        self._timeout_s = timeout_s
        self._sock: socket.socket | None = None
        self._reader: threading.Thread | None = None
        self._replies: queue.Queue[Any] = queue.Queue()
        self._closed = threading.Event()
        self._call_lock = threading.Lock()
        self._subscribers: dict[str, ScanCallback] = {}
        self._subscribers_lock = threading.Lock()
        self._request_ids = itertools.count(1)
        self._scanner_ids = itertools.count(1)

    def open(self) -> None:
        try:
            af_unix = socket.AF_UNIX
        except AttributeError as exc:
            raise ConnectionUnavailable(
                "This Python build does not expose UNIX domain sockets (AF_UNIX)."
            ) from exc

        try:
            sock = socket.socket(af_unix, socket.SOCK_STREAM)
        except OSError as exc:
            raise ConnectionUnavailable(f"Could not create socket: {exc}") from exc
        sock.settimeout(self._timeout_s)
        try:
            sock.connect(self.path)
        except OSError as exc:
            sock.close()
            raise ConnectionUnavailable(f"Could not connect to {self.path}: {exc}") from exc
        sock.settimeout(None)

        self._sock = sock
        self._reader = threading.Thread(
            target=self._read_loop,
            args=(sock,),
            name="lowpanctl-reader",
            daemon=True,
        )
        self._reader.start()
        LOGGER.debug("Connected to %s", self.path)

    def close(self) -> None:
        if self._sock is None:
            return
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()
        self._sock = None
        if self._reader is not None:
            self._reader.join(timeout=self._timeout_s)

    def next_scanner_id(self) -> str:
        return f"scan-{next(self._scanner_ids)}"

    def subscribe(self, scanner_id: str, callback: ScanCallback) -> None:
        with self._subscribers_lock:
            self._subscribers[scanner_id] = callback

    def unsubscribe(self, scanner_id: str) -> None:
        with self._subscribers_lock:
            self._subscribers.pop(scanner_id, None)

    def call(self, method: str, **params: Any) -> Any:
        if self._sock is None:
            raise ConnectionUnavailable("Not connected to the LoWPAN service")
        if self._closed.is_set():
            raise ConnectionUnavailable("Connection closed by the LoWPAN service")

        with self._call_lock:
            request_id = next(self._request_ids)
            line = json.dumps({"id": request_id, "method": method, "params": params}) + "\n"
            LOGGER.debug("-> %s", line.rstrip())
            try:
                self._sock.sendall(line.encode("utf-8"))
            except OSError as exc:
                raise ConnectionUnavailable(f"Send to {self.path} failed: {exc}") from exc

            while True:
                try:
                    reply = self._replies.get(timeout=self._timeout_s)
                except queue.Empty as exc:
                    raise ProtocolError(
                        f"No reply to '{method}' within {self._timeout_s:.1f}s"
                    ) from exc
                if reply is _CLOSED:
                    raise ConnectionUnavailable("Connection closed by the LoWPAN service")
                if reply.get("id") == request_id:
                    break
                LOGGER.debug("Discarding stale reply %r", reply)

        error = reply.get("error")
        if error is not None:
            try:
                code, message = int(error["code"]), str(error["message"])
            except (KeyError, TypeError, ValueError) as exc:
                raise ProtocolError(f"Malformed error reply: {error!r}") from exc
            raise ServiceRejected(code, message)
        return reply.get("result")

    def _read_loop(self, sock: socket.socket) -> None:
        stream = sock.makefile("r", encoding="utf-8", newline="\n")
        try:
            for line in stream:
                line = line.strip()
                if not line:
                    continue
                try:
                    message = json.loads(line)
                except json.JSONDecodeError:
                    LOGGER.warning("Ignoring malformed message from daemon: %r", line)
                    continue
                if not isinstance(message, dict):
                    LOGGER.warning("Ignoring non-object message from daemon: %r", line)
                    continue
                if "event" in message:
                    self._dispatch_event(message)
                else:
                    self._replies.put(message)
        except (OSError, ValueError) as exc:
            LOGGER.debug("Reader stopped: %s", exc)
        finally:
            stream.close()
            self._closed.set()
            self._replies.put(_CLOSED)

    def _dispatch_event(self, message: dict[str, Any]) -> None:
        scanner_id = message.get("scanner")
        with self._subscribers_lock:
            callback = self._subscribers.get(scanner_id)
        if callback is None:
            LOGGER.debug("No subscriber for event %r", message)
            return

        event = message["event"]
        if event == "scan_result":
            try:
                result = decode_scan_result(message.get("kind", ""), message.get("data"))
            except ProtocolError as exc:
                LOGGER.warning("Ignoring scan event: %s", exc)
                return
            callback.on_result(result)
        elif event == "scan_finished":
            self.unsubscribe(scanner_id)
            callback.on_finished()
        else:
            LOGGER.debug("Ignoring unknown event %r", event)


class SocketScanner:
    def __init__(self, connection: SocketConnection, interface: str) -> None:
        self._conn = connection
        self._interface = interface
        self._id = connection.next_scanner_id()
        self._channels: list[int] = []
        self._callback: ScanCallback | None = None

    def add_channel(self, channel: int) -> None:
        if channel not in self._channels:
            self._channels.append(channel)

    def set_callback(self, callback: ScanCallback) -> None:
        self._callback = callback

    def start_net_scan(self) -> None:
        self._start("net")

    def start_energy_scan(self) -> None:
        self._start("energy")

    def stop_scan(self) -> None:
        try:
            self._conn.call("stop_scan", interface=self._interface, scanner=self._id)
        finally:
            self._conn.unsubscribe(self._id)

    def _start(self, kind: str) -> None:
        if self._callback is not None:
            self._conn.subscribe(self._id, self._callback)
        try:
            self._conn.call(
                "start_scan",
                interface=self._interface,
                scanner=self._id,
                kind=kind,
                channels=self._channels,
            )
        except Exception:
            self._conn.unsubscribe(self._id)
            raise


class SocketLowpanInterface:
    def __init__(self, connection: SocketConnection, name: str) -> None:
        self._conn = connection
        self.name = name

    def reset(self) -> None:
        self._conn.call("reset", interface=self.name)

    def attach(self, provision: Provision) -> None:
        self._conn.call("attach", interface=self.name, provision=encode_provision(provision))

    def join(self, provision: Provision) -> None:
        self._conn.call("join", interface=self.name, provision=encode_provision(provision))

    def form(self, provision: Provision) -> None:
        self._conn.call("form", interface=self.name, provision=encode_provision(provision))

    def leave(self) -> None:
        self._conn.call("leave", interface=self.name)

    def set_up(self, up: bool) -> None:
        self._conn.call("set_up", interface=self.name, up=up)

    def get_identity(self) -> Identity:
        return decode_identity(self._conn.call("get_identity", interface=self.name))

    def get_property_keys(self) -> list[str]:
        return [str(key) for key in self._conn.call("get_property_keys", interface=self.name) or ()]

    def get_property(self, key: str) -> PropertyValue | None:
        return decode_property(self._conn.call("get_property", interface=self.name, key=key))

    def create_scanner(self) -> SocketScanner:
        return SocketScanner(self._conn, self.name)


class SocketLowpanManager:
    def __init__(self, connection: SocketConnection) -> None:
        self._conn = connection

    @classmethod
    def connect(cls, path: str, *, timeout_s: float = 5.0) -> SocketLowpanManager:
        connection = SocketConnection(path, timeout_s=timeout_s)
        connection.open()
        return cls(connection)

    def get_interface_list(self) -> list[str]:
        return [str(name) for name in self._conn.call("list_interfaces") or ()]

    def get_interface(self, name: str) -> SocketLowpanInterface | None:
        if name not in self.get_interface_list():
            return None
        return SocketLowpanInterface(self._conn, name)

    def close(self) -> None:
        self._conn.close()
