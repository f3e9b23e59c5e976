from __future__ import annotations

from lowpanctl.core.formatter import format_property
from lowpanctl.core.model import (
    KEY_NETWORK_PANID,
    KEY_NETWORK_XPANID,
    KEY_THREAD_RLOC16,
    BoolValue,
    BytesValue,
    ErrorValue,
    Int32Value,
    Int64Value,
    IntListValue,
    StringListValue,
    StringValue,
)


def test_bytes_render_as_uppercase_hex() -> None:
    assert format_property("Some:Key", BytesValue(bytes.fromhex("00abcdef"))) == "00ABCDEF"


def test_empty_string_list_renders_braces() -> None:
    assert format_property("IPv6:AllAddresses", StringListValue(())) == "{ }"


def test_string_list_renders_quoted_block() -> None:
    rendered = format_property("IPv6:AllAddresses", StringListValue(("a", "b")))
    assert rendered == '{\n\t"a"\n\t"b"\n}'


def test_int_list_renders_block() -> None:
    assert format_property("Thread:ChildTable", IntListValue(())) == "{ }"
    assert format_property("Thread:ChildTable", IntListValue((11, -3))) == "{\n\t11\n\t-3\n}"


def test_panid_renders_four_uppercase_hex_digits() -> None:
    assert format_property(KEY_NETWORK_PANID, Int32Value(300)) == "0x012C"
    assert format_property(KEY_NETWORK_PANID, Int32Value(0x1ABCD)) == "0xABCD"
    assert format_property(KEY_NETWORK_PANID, Int32Value(-1)) == "0xFFFF"


def test_rloc16_uses_short_address_form() -> None:
    assert format_property(KEY_THREAD_RLOC16, Int32Value(0x0C00)) == "0x0C00"


def test_xpanid_renders_unpadded_lowercase_hex() -> None:
    assert format_property(KEY_NETWORK_XPANID, Int64Value(0xABCD)) == "0xabcd"
    assert format_property(KEY_NETWORK_XPANID, Int64Value(-1)) == "0xffffffffffffffff"


def test_integers_on_other_keys_render_decimal() -> None:
    assert format_property("Network:Channel", Int32Value(300)) == "300"
    assert format_property(KEY_NETWORK_PANID, Int64Value(300)) == "300"
    assert format_property(KEY_NETWORK_XPANID, Int32Value(0xABCD)) == str(0xABCD)


def test_scalar_and_error_values() -> None:
    assert format_property("Interface:State", StringValue("offline")) == "offline"
    assert format_property("Interface:Enabled", BoolValue(True)) == "true"
    assert format_property("Interface:Enabled", BoolValue(False)) == "false"
    assert format_property("NCP:Version", ErrorValue("ServiceSpecificException: 7: nope")) == (
        "ServiceSpecificException: 7: nope"
    )
