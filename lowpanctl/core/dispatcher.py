"""Subcommand dispatch for lowpanctl."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence

from lowpanctl.core.args import ArgStream, decode_int
from lowpanctl.core.errors import (
    CommandError,
    ConnectionUnavailable,
    NoInterfacesPresent,
    ServiceError,
    ServiceRejected,
    UnknownInterface,
    UnrecognizedArgument,
)
from lowpanctl.core.formatter import error_value, format_property
from lowpanctl.core.model import STATUS_KEYS, ScanKind, ScanResult
from lowpanctl.core.provision import build_provision
from lowpanctl.core.scan import SCAN_TIMEOUT_S, ScanCoordinator
from lowpanctl.transports.base import LowpanInterface, LowpanManager

NO_SYSTEM_ERROR_CODE = "Error type 2"
LOGGER = logging.getLogger(__name__)

Echo = Callable[[str], None]


class ExitStatus(enum.IntEnum):
    OK = 0
    FAILURE = 1
    USAGE = 2
    UNAVAILABLE = 3


class CommandDispatcher:
    """Parse global options, pick one subcommand, and run it.

    ``connect`` is called once before any parsing; it returns the manager for
    the management service or raises ConnectionUnavailable.
    """

    def __init__(
        self,
        connect: Callable[[], LowpanManager],
        *,
        echo: Echo,
        echo_err: Echo,
        interface_name: str | None = None,
        scan_timeout_s: float = SCAN_TIMEOUT_S,
    ) -> None:
        self._connect = connect
        self._echo = echo
        self._echo_err = echo_err
        self._interface_name = interface_name
        self._scan_timeout_s = scan_timeout_s
        self._manager: LowpanManager | None = None
        self._interface: LowpanInterface | None = None
        self._commands: dict[str, Callable[[ArgStream], None]] = {}
        for names, handler in (
            (("status", "stat"), self._run_status),
            (("scan", "netscan", "ns"), self._run_net_scan),
            (("up", "attach"), self._run_attach),
            (("down", "detach"), self._run_detach),
            (("join",), self._run_join),
            (("form",), self._run_form),
            (("leave",), self._run_leave),
            (("get", "getprop"), self._run_get_prop),
            (("set", "setprop"), self._run_set_prop),
            (("energyscan", "energy", "es"), self._run_energy_scan),
            (("list", "ls"), self._run_list_interfaces),
            (("reset",), self._run_reset),
        ):
            for name in names:
                self._commands[name] = handler

    def run(self, tokens: Sequence[str]) -> ExitStatus:
        try:
            self._manager = self._connect()
        except ConnectionUnavailable as exc:
            LOGGER.debug("Service connection failed: %s", exc)
            self._echo_err(NO_SYSTEM_ERROR_CODE)
            self._echo("error: Can't connect to LoWPAN service; is the service running?")
            return ExitStatus.UNAVAILABLE

        try:
            return self._dispatch(ArgStream(tokens))
        except ServiceRejected as exc:
            self._echo(f"ServiceSpecificException: {exc.code}: {exc.message}")
        except (CommandError, ServiceError) as exc:
            self._echo(f"error: {exc}")
        finally:
            self._manager.close()
        return ExitStatus.FAILURE

    def _dispatch(self, args: ArgStream) -> ExitStatus:
        for op in args:
            if op in ("-I", "--interface"):
                self._interface_name = args.next_arg_required(op)
                continue
            if op.startswith("-"):
                raise UnrecognizedArgument(op)
            handler = self._commands.get(op)
            if handler is None:
                self._echo_err(f"Error: unknown command '{op}'")
                return ExitStatus.USAGE
            LOGGER.debug("Dispatching %r with %r", op, args.remaining())
            handler(args)
            return ExitStatus.OK

        self._echo_err("Error: no command specified")
        return ExitStatus.USAGE

    def _require_manager(self) -> LowpanManager:
        if self._manager is None:
            raise ConnectionUnavailable("Not connected to the LoWPAN service")
        return self._manager

    def _get_interface(self) -> LowpanInterface:
        if self._interface is None:
            manager = self._require_manager()
            if self._interface_name is None:
                names = list(manager.get_interface_list())
                if not names:
                    raise NoInterfacesPresent()
                self._interface_name = names[0]
            interface = manager.get_interface(self._interface_name)
            if interface is None:
                raise UnknownInterface(self._interface_name)
            LOGGER.debug("Using interface %s", self._interface_name)
            self._interface = interface
        return self._interface

    def _run_reset(self, args: ArgStream) -> None:
        self._get_interface().reset()

    def _run_attach(self, args: ArgStream) -> None:
        provision = build_provision(args, credential_required=True)
        self._echo(f"Attaching to {provision.identity} with provided credential")
        self._get_interface().attach(provision)
        self._echo("Attached.")

    def _run_detach(self, args: ArgStream) -> None:
        self._get_interface().set_up(False)

    def _run_leave(self, args: ArgStream) -> None:
        self._get_interface().leave()

    def _run_join(self, args: ArgStream) -> None:
        provision = build_provision(args, credential_required=True)
        self._echo(f"Joining {provision.identity} with provided credential")
        self._get_interface().join(provision)
        self._echo("Joined.")

    def _run_form(self, args: ArgStream) -> None:
        provision = build_provision(args, credential_required=False)
        if provision.credential is not None:
            self._echo(f"Forming {provision.identity} with provided credential")
        else:
            self._echo(f"Forming {provision.identity}")
        self._get_interface().form(provision)
        self._echo("Formed.")

    def _run_get_prop(self, args: ArgStream) -> None:
        key = args.next_arg()
        interface = self._get_interface()
        if key is not None:
            value = interface.get_property(key)
            self._echo(format_property(key, value) if value is not None else "null")
            return

        for subkey in interface.get_property_keys():
            try:
                value = interface.get_property(subkey)
            except ConnectionUnavailable:
                raise
            except ServiceError as exc:
                value = error_value(exc)
            rendered = format_property(subkey, value) if value is not None else "null"
            self._echo(f"{subkey} => {rendered}")

    def _run_set_prop(self, args: ArgStream) -> None:
        self._echo("Command not implemented")

    def _run_status(self, args: ArgStream) -> None:
        interface = self._get_interface()
        self._echo(f"Current Network => {interface.get_identity()}")
        for key in STATUS_KEYS:
            try:
                value = interface.get_property(key)
            except ConnectionUnavailable:
                raise
            except ServiceError as exc:
                LOGGER.debug("Skipping status key %s: %s", key, exc)
                continue
            if value is not None:
                self._echo(f"{key} => {format_property(key, value)}")

    def _run_list_interfaces(self, args: ArgStream) -> None:
        for name in self._require_manager().get_interface_list():
            self._echo(name)

    def _run_net_scan(self, args: ArgStream) -> None:
        self._run_scan(args, ScanKind.NET)

    def _run_energy_scan(self, args: ArgStream) -> None:
        self._run_scan(args, ScanKind.ENERGY)

    def _run_scan(self, args: ArgStream, kind: ScanKind) -> None:
        scanner = self._get_interface().create_scanner()
        channels: set[int] = set()
        for arg in args:
            if arg in ("-c", "--channel"):
                channels.add(decode_int(args.next_arg_required(arg), context="channel"))
            else:
                raise UnrecognizedArgument(arg)

        def emit(result: ScanResult) -> None:
            self._echo(str(result))

        coordinator = ScanCoordinator(emit, timeout_s=self._scan_timeout_s)
        coordinator.run_scan(scanner, kind, channels)
