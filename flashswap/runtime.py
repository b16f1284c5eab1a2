"""In-memory contract runtime: global state, named keys, call stack and dictionaries."""

from __future__ import annotations

import copy
import itertools
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from .keys import Key, KeyKind, key_to_str, keys_to_str

USER_ERROR_BASE = 65536

NONE = 1
CONTRACT_NOT_FOUND = 7
UNEXPECTED_KEY_VARIANT = 9
DUPLICATE_KEY = 22

_HASH_LENGTH = 32


class Revert(Exception):
    """Execution was aborted with an error code."""

    def __init__(self, code: int) -> None:
        self.code = int(code)
        super().__init__(f"reverted with error {self.code}")


def user_error(code: int) -> int:
    """Error code for a contract-defined error number."""
    if not 0 <= code < USER_ERROR_BASE:
        raise ValueError(f"user error code out of range: {code}")
    return USER_ERROR_BASE + code


@dataclass(frozen=True)
class URef:
    """Reference to a value in global state."""

    addr: bytes


@dataclass(frozen=True)
class CallFrame:
    """One element of the call stack: a session, stored session or stored contract."""

    account_hash: bytes | None = None
    contract_package_hash: bytes | None = None
    contract_hash: bytes | None = None

    def to_key(self) -> Key:
        """The account for sessions, the contract package for stored contracts."""
        if self.account_hash is not None:
            return Key.account(self.account_hash)
        if self.contract_package_hash is not None:
            return Key.hash(self.contract_package_hash)
        raise ValueError("call frame names neither an account nor a package")


def _hash_bytes(value: Key | bytes) -> bytes:
    if isinstance(value, Key):
        if value.kind is not KeyKind.HASH:
            raise Revert(UNEXPECTED_KEY_VARIANT)
        return value.data
    data = bytes(value)
    if len(data) != _HASH_LENGTH:
        raise ValueError(f"a hash holds {_HASH_LENGTH} bytes, got {len(data)}")
    return data


def _account_bytes(value: Key | bytes) -> bytes:
    if isinstance(value, Key):
        if value.kind is not KeyKind.ACCOUNT:
            raise ValueError("a session runs under an account key")
        return value.data
    data = bytes(value)
    if len(data) != _HASH_LENGTH:
        raise ValueError(f"an account hash holds {_HASH_LENGTH} bytes, got {len(data)}")
    return data


class Runtime:
    """Global state shared by installed contracts, with a call stack."""

    def __init__(self) -> None:
        self._values: dict[bytes, Any] = {}
        self._addresses = itertools.count(1)
        self._contracts: dict[bytes, tuple[bytes, Any]] = {}
        self._contract_keys: dict[bytes, dict[str, Any]] = {}
        self._account_keys: dict[bytes, dict[str, Any]] = {}
        self._stack: list[CallFrame] = []

    def new_uref(self, value: Any) -> URef:
        addr = next(self._addresses).to_bytes(_HASH_LENGTH, "big")
        self._values[addr] = value
        return URef(addr)

    def read(self, uref: URef) -> Any:
        try:
            return self._values[uref.addr]
        except KeyError:
            raise Revert(NONE) from None

    def write(self, uref: URef, value: Any) -> None:
        if uref.addr not in self._values:
            raise Revert(NONE)
        self._values[uref.addr] = value

    def install(self, package_hash: Key | bytes, contract_hash: Key | bytes, contract: Any) -> None:
        """Register a contract object whose public methods are its entry points."""
        package = _hash_bytes(package_hash)
        contract_id = _hash_bytes(contract_hash)
        if contract_id in self._contracts:
            raise ValueError(f"contract {contract_id.hex()} is already installed")
        self._contracts[contract_id] = (package, contract)
        self._contract_keys[contract_id] = {}

    def call_contract(
        self, contract_hash: Key | bytes, entry_point: str, args: Mapping[str, Any] | None = None
    ) -> Any:
        contract_id = _hash_bytes(contract_hash)
        try:
            package, contract = self._contracts[contract_id]
        except KeyError:
            raise Revert(CONTRACT_NOT_FOUND) from None
        method = None if entry_point.startswith("_") else getattr(contract, entry_point, None)
        if not callable(method):
            raise Revert(CONTRACT_NOT_FOUND)
        self._stack.append(CallFrame(contract_package_hash=package, contract_hash=contract_id))
        try:
            return method(**dict(args or {}))
        finally:
            self._stack.pop()

    @contextmanager
    def session(self, account: Key | bytes) -> Iterator[Runtime]:
        """Run as a deploy of the given account; state is rolled back if it fails."""
        account_hash = _account_bytes(account)
        snapshot = (
            copy.deepcopy(self._values),
            copy.deepcopy(self._contract_keys),
            copy.deepcopy(self._account_keys),
            dict(self._contracts),
        )
        self._stack.append(CallFrame(account_hash=account_hash))
        try:
            yield self
        except BaseException:
            self._values, self._contract_keys, self._account_keys, self._contracts = snapshot
            raise
        finally:
            self._stack.pop()

    def call_stack(self) -> tuple[CallFrame, ...]:
        return tuple(self._stack)

    def named_keys(self) -> dict[str, Any]:
        """Named keys of the account or contract in the current frame."""
        if not self._stack:
            raise RuntimeError("no active call")
        frame = self._stack[-1]
        if frame.contract_hash is not None and frame.account_hash is None:
            return self._contract_keys[frame.contract_hash]
        return self._account_keys.setdefault(frame.account_hash, {})


class ContractContext:
    """Base for contract logic: caller lookup and named-key storage."""

    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime

    def get_caller(self) -> Key:
        stack = self.runtime.call_stack()
        if len(stack) < 2:
            raise Revert(NONE)
        return stack[-2].to_key()

    def self_addr(self) -> Key:
        stack = self.runtime.call_stack()
        if not stack:
            raise Revert(NONE)
        return stack[-1].to_key()

    def get_key(self, name: str) -> Any:
        stored = self.runtime.named_keys().get(name)
        if stored is None:
            return None
        if not isinstance(stored, URef):
            raise Revert(UNEXPECTED_KEY_VARIANT)
        return self.runtime.read(stored)

    def set_key(self, name: str, value: Any) -> None:
        keys = self.runtime.named_keys()
        stored = keys.get(name)
        if stored is None:
            keys[name] = self.runtime.new_uref(value)
        elif isinstance(stored, URef):
            self.runtime.write(stored, value)
        else:
            raise Revert(UNEXPECTED_KEY_VARIANT)


class Dict:
    """A named dictionary in global state with string item keys."""

    def __init__(self, runtime: Runtime, uref: URef) -> None:
        self.runtime = runtime
        self.uref = uref

    @classmethod
    def init(cls, context: ContractContext, name: str) -> Dict:
        keys = context.runtime.named_keys()
        if name in keys:
            raise Revert(DUPLICATE_KEY)
        uref = context.runtime.new_uref({})
        keys[name] = uref
        return cls(context.runtime, uref)

    @classmethod
    def instance(cls, context: ContractContext, name: str) -> Dict:
        stored = context.runtime.named_keys().get(name)
        if not isinstance(stored, URef):
            raise Revert(NONE)
        return cls(context.runtime, stored)

    def get(self, key: str) -> Any:
        return self.runtime.read(self.uref).get(key)

    def get_by_key(self, key: Key) -> Any:
        return self.get(key_to_str(key))

    def get_by_keys(self, key_a: Key, key_b: Key) -> Any:
        return self.get(keys_to_str(key_a, key_b))

    def set(self, key: str, value: Any) -> None:
        items = dict(self.runtime.read(self.uref))
        items[key] = value
        self.runtime.write(self.uref, items)

    def set_by_key(self, key: Key, value: Any) -> None:
        self.set(key_to_str(key), value)

    def set_by_keys(self, key_a: Key, key_b: Key, value: Any) -> None:
        self.set(keys_to_str(key_a, key_b), value)

    def remove(self, key: str) -> None:
        items = dict(self.runtime.read(self.uref))
        items.pop(key, None)
        self.runtime.write(self.uref, items)

    def remove_by_key(self, key: Key) -> None:
        self.remove(key_to_str(key))

    def remove_by_keys(self, key_a: Key, key_b: Key) -> None:
        self.remove(keys_to_str(key_a, key_b))