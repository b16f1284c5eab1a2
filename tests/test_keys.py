import string

import pytest

from flashswap.keys import Key, KeyKind, key_to_str, keys_to_str

ZERO_HASH = "hash-0000000000000000000000000000000000000000000000000000000000000000"
SAMPLE = bytes(range(32))


def test_zero_hash_parses_and_formats_back():
    key = Key.from_formatted_str(ZERO_HASH)
    assert key == Key.hash(bytes(32))
    assert key.to_formatted_string() == ZERO_HASH
    assert str(key) == ZERO_HASH


@pytest.mark.parametrize("kind", [KeyKind.ACCOUNT, KeyKind.HASH])
def test_formatted_round_trip(kind):
    key = Key(kind, SAMPLE)
    text = key.to_formatted_string()
    assert text.startswith(kind.value + "-")
    assert Key.from_formatted_str(text) == key


def test_account_prefix_is_not_confused_with_hash():
    account = Key.account(SAMPLE)
    parsed = Key.from_formatted_str(account.to_formatted_string())
    assert parsed.kind is KeyKind.ACCOUNT


def test_serialized_form_has_kind_tag():
    assert Key.hash(bytes(32)).to_bytes() == b"\x01" + bytes(32)
    assert Key.account(bytes(32)).to_bytes() == b"\x00" + bytes(32)
    assert Key.hash(SAMPLE).to_bytes()[1:] == SAMPLE


@pytest.mark.parametrize(
    "text",
    [
        "",
        "hash-00",
        "hash-" + "g" * 64,
        "hash-" + "0" * 66,
        "uref-" + "0" * 64,
        "hash-" + " " * 64,
    ],
)
def test_malformed_strings_are_rejected(text):
    with pytest.raises(ValueError):
        Key.from_formatted_str(text)


def test_wrong_length_is_rejected():
    with pytest.raises(ValueError):
        Key.hash(b"short")


def test_key_to_str_is_hex_of_address():
    assert key_to_str(Key.hash(SAMPLE)) == SAMPLE.hex()
    assert key_to_str(Key.account(SAMPLE)) == SAMPLE.hex()


def test_keys_to_str_shape_and_determinism():
    a, b = Key.hash(SAMPLE), Key.account(bytes(32))
    first = keys_to_str(a, b)
    assert len(first) == 64
    assert set(first) <= set(string.hexdigits.lower())
    assert keys_to_str(a, b) == first


def test_keys_to_str_depends_on_order_and_kind():
    a, b = Key.hash(SAMPLE), Key.hash(bytes(32))
    assert keys_to_str(a, b) != keys_to_str(b, a)
    assert keys_to_str(a, b) != keys_to_str(Key.account(SAMPLE), b)