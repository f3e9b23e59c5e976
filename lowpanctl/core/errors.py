"""Domain-specific errors for lowpanctl."""

from __future__ import annotations


class LowpanctlError(Exception):
    """Base error for lowpanctl."""


class CommandError(LowpanctlError):
    """Raised for user/argument mistakes; reported as ``error: <description>``."""


class UnrecognizedArgument(CommandError):
    """Raised when a token is not understood where it appears."""

    def __init__(self, arg: str) -> None:
        super().__init__(f'Unrecognized argument "{arg}"')
        self.arg = arg


class MissingArgument(CommandError):
    """Raised when an option is last in the stream but needs a value."""

    def __init__(self, option: str) -> None:
        super().__init__(f'Argument expected after "{option}"')
        self.option = option


class InvalidArgument(CommandError):
    """Raised when an option value cannot be decoded."""


class CredentialRequired(CommandError):
    """Raised when an operation needs a credential and none was given."""

    def __init__(self) -> None:
        super().__init__("No credential (like a master key) was specified!")


class NoInterfacesPresent(CommandError):
    def __init__(self) -> None:
        super().__init__("No LoWPAN interfaces are present")


class UnknownInterface(CommandError):
    def __init__(self, name: str) -> None:
        super().__init__(f'Unknown LoWPAN interface "{name}"')
        self.name = name


class ScanTimeout(CommandError):
    def __init__(self) -> None:
        super().__init__("Timeout while waiting for scan to complete.")


class ConfigError(LowpanctlError):
    """Raised when the configuration file is unreadable or invalid."""


class ServiceError(LowpanctlError):
    """Base error for failures on the management-service side."""


class ServiceRejected(ServiceError):
    """Raised when the service explicitly refuses a call."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class ConnectionUnavailable(ServiceError):
    """Raised when the management service cannot be reached."""


class ProtocolError(ServiceError):
    """Raised on malformed, missing, or late replies from the service."""
