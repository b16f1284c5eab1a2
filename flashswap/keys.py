"""Global-state keys and the string forms used to address dictionary entries."""

from __future__ import annotations

import hashlib
import string
from dataclasses import dataclass
from enum import Enum

_HASH_LENGTH = 32
_HEX_DIGITS = frozenset(string.hexdigits)


class KeyKind(Enum):
    """The kinds of key that can address an account or a stored contract."""

    ACCOUNT = "account-hash"
    HASH = "hash"

    @property
    def tag(self) -> int:
        """The byte that leads the serialized form of a key of this kind."""
        return _TAGS[self]


_TAGS = {KeyKind.ACCOUNT: 0, KeyKind.HASH: 1}


@dataclass(frozen=True)
class Key:
    """A 32-byte address of an account or of a contract."""

    kind: KeyKind
    data: bytes

    def __post_init__(self) -> None:
        data = bytes(self.data)
        if len(data) != _HASH_LENGTH:
            raise ValueError(f"a key holds {_HASH_LENGTH} bytes, got {len(data)}")
        object.__setattr__(self, "data", data)

    @classmethod
    def account(cls, data: bytes) -> Key:
        """Key of an account."""
        return cls(KeyKind.ACCOUNT, data)

    @classmethod
    def hash(cls, data: bytes) -> Key:
        """Key of a contract or contract package."""
        return cls(KeyKind.HASH, data)

    @classmethod
    def from_formatted_str(cls, text: str) -> Key:
        """Parse ``account-hash-<hex>`` or ``hash-<hex>``."""
        for kind in (KeyKind.ACCOUNT, KeyKind.HASH):
            prefix = f"{kind.value}-"
            if text.startswith(prefix):
                digits = text[len(prefix):]
                if len(digits) != 2 * _HASH_LENGTH or not set(digits) <= _HEX_DIGITS:
                    raise ValueError(f"malformed key: {text!r}")
                return cls(kind, bytes.fromhex(digits))
        raise ValueError(f"unknown key prefix: {text!r}")

    def to_formatted_string(self) -> str:
        return f"{self.kind.value}-{self.data.hex()}"

    def to_bytes(self) -> bytes:
        """Serialized form: a kind tag followed by the 32 address bytes."""
        return bytes([self.kind.tag]) + self.data

    def __str__(self) -> str:
        return self.to_formatted_string()


def key_to_str(key: Key) -> str:
    """Dictionary item key for a single key: its address in lower-case hex."""
    if key.kind not in (KeyKind.ACCOUNT, KeyKind.HASH):
        raise ValueError(f"unexpected key variant: {key.kind}")
    return key.data.hex()


def keys_to_str(key_a: Key, key_b: Key) -> str:
    """Dictionary item key for an ordered pair of keys: hex of a 32-byte blake2b digest."""
    digest = hashlib.blake2b(digest_size=_HASH_LENGTH)
    digest.update(key_a.to_bytes())
    digest.update(key_b.to_bytes())
    return digest.hexdigest()