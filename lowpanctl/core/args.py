"""Token stream and literal decoders shared by the dispatcher and parsers."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from lowpanctl.core.errors import InvalidArgument, MissingArgument

_HEX_RE = re.compile(r"^[0-9a-f]+$")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class ArgStream:
    """Left-to-right cursor over command-line tokens.

    The stream is shared: the dispatcher consumes global options and the
    subcommand name, then hands the same stream to the subcommand handler.
    """

    def __init__(self, tokens: Iterable[str]) -> None:
        self._tokens = list(tokens)
        self._pos = 0

    def __iter__(self) -> Iterator[str]:
        while True:
            token = self.next_arg()
            if token is None:
                return
            yield token

    def next_arg(self) -> str | None:
        if self._pos >= len(self._tokens):
            return None
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def next_arg_required(self, option: str) -> str:
        token = self.next_arg()
        if token is None:
            raise MissingArgument(option)
        return token

    def remaining(self) -> tuple[str, ...]:
        return tuple(self._tokens[self._pos :])


def decode_int(text: str, *, context: str = "value") -> int:
    """Decode an integer literal.

    Accepts an optional sign followed by ``0x``/``0X``/``#`` hexadecimal, a
    leading-zero octal literal, or plain decimal. The result must fit in a
    signed 32-bit integer.
    """
    literal = text.strip()
    negative = False
    if literal[:1] in ("-", "+"):
        negative = literal[0] == "-"
        literal = literal[1:]

    base = 10
    if literal[:2] in ("0x", "0X"):
        base, literal = 16, literal[2:]
    elif literal[:1] == "#":
        base, literal = 16, literal[1:]
    elif literal.startswith("0") and len(literal) > 1:
        base, literal = 8, literal[1:]

    if not literal or literal[:1] in ("-", "+") or "_" in literal:
        raise InvalidArgument(f"Invalid {context} {text!r}")
    try:
        value = int(literal, base)
    except ValueError as exc:
        raise InvalidArgument(f"Invalid {context} {text!r}") from exc

    if negative:
        value = -value
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise InvalidArgument(f"{context} {text!r} is out of range")
    return value


def decode_hex(text: str, *, context: str = "value") -> bytes:
    normalized = text.strip().lower()
    if len(normalized) == 0:
        raise InvalidArgument(f"{context} must not be empty")
    if len(normalized) % 2 != 0:
        raise InvalidArgument(f"{context} must have even-length hex")
    if not _HEX_RE.match(normalized):
        raise InvalidArgument(f"{context} must contain only [0-9a-f]")
    return bytes.fromhex(normalized)
