"""Installation of the flash swapper contract and the entry points it exposes."""

from __future__ import annotations

import secrets
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping

from .keys import Key
from .runtime import Revert, Runtime, URef
from .swapper import FlashSwapper

PERMISSION_DENIED = 23
CONSTRUCTOR_GROUP = "constructor"

_HASH_LENGTH = 32


@dataclass(frozen=True)
class EntryPoint:
    """Declared signature of a contract entry point."""

    name: str
    parameters: tuple[tuple[str, str], ...] = ()
    returns: str = "Unit"
    groups: tuple[str, ...] = ()

    @property
    def is_public(self) -> bool:
        return not self.groups


def entry_points() -> tuple[EntryPoint, ...]:
    """The entry points of the flash swapper contract."""
    return (
        EntryPoint(
            "constructor",
            (
                ("wcspr", "Key"),
                ("dai", "Key"),
                ("uniswap_v2_factory", "Key"),
                ("contract_hash", "ContractHash"),
                ("package_hash", "ContractPackageHash"),
                ("purse", "URef"),
            ),
            groups=(CONSTRUCTOR_GROUP,),
        ),
        EntryPoint(
            "start_swap",
            (
                ("token_borrow", "Key"),
                ("amount", "U256"),
                ("token_pay", "Key"),
                ("user_data", "String"),
            ),
        ),
        EntryPoint(
            "uniswap_v2_call",
            (
                ("sender", "Key"),
                ("amount0", "U256"),
                ("amount1", "U256"),
                ("data", "String"),
            ),
        ),
        EntryPoint("purse", returns="URef"),
        EntryPoint("package_hash", returns="ContractPackageHash"),
    )


def _as_hash_key(value: Key | bytes) -> Key:
    return value if isinstance(value, Key) else Key.hash(value)


class _ConstructorGuard:
    """Restricts the constructor entry point to the installation that created the contract."""

    def __init__(self) -> None:
        self._constructor_open = False

    def _check_constructor_access(self) -> None:
        if not self._constructor_open:
            raise Revert(PERMISSION_DENIED)

    @contextmanager
    def _constructor_access(self) -> Iterator[None]:
        self._constructor_open = True
        try:
            yield
        finally:
            self._constructor_open = False


def _install(
    runtime: Runtime,
    account: Key | bytes,
    contract_name: str,
    contract: _ConstructorGuard,
    constructor_args: Callable[[Key, Key], Mapping[str, Any]],
) -> Key:
    """Install a contract, run its constructor once and record it in the account's named keys."""
    package_key = Key.hash(secrets.token_bytes(_HASH_LENGTH))
    contract_key = Key.hash(secrets.token_bytes(_HASH_LENGTH))
    with runtime.session(account):
        access_token = runtime.new_uref(package_key)
        runtime.install(package_key, contract_key, contract)
        args = constructor_args(contract_key, package_key)
        with contract._constructor_access():
            runtime.call_contract(contract_key, "constructor", args)

        keys = runtime.named_keys()
        keys[f"{contract_name}_package_hash"] = package_key
        keys[f"{contract_name}_package_hash_wrapped"] = runtime.new_uref(package_key)
        keys[f"{contract_name}_contract_hash"] = contract_key
        keys[f"{contract_name}_contract_hash_wrapped"] = runtime.new_uref(contract_key)
        keys[f"{contract_name}_package_access_token"] = access_token
    return contract_key


class FlashSwapperContract(_ConstructorGuard):
    """The flash swapper as installed: only its declared entry points are callable."""

    def __init__(self, runtime: Runtime, swapper: FlashSwapper | None = None) -> None:
        super().__init__()
        self._swapper = swapper if swapper is not None else FlashSwapper(runtime)

    def constructor(
        self,
        wcspr: Key,
        dai: Key,
        uniswap_v2_factory: Key,
        contract_hash: Key | bytes,
        package_hash: Key | bytes,
        purse: URef,
    ) -> None:
        self._check_constructor_access()
        self._swapper.init(
            wcspr,
            dai,
            uniswap_v2_factory,
            _as_hash_key(contract_hash),
            _as_hash_key(package_hash),
            purse,
        )

    def start_swap(self, token_borrow: Key, amount: int, token_pay: Key, user_data: str) -> None:
        self._swapper.start_swap(token_borrow, amount, token_pay, user_data)

    def uniswap_v2_call(self, sender: Key, amount0: int, amount1: int, data: str) -> None:
        self._swapper.uniswap_v2_call(sender, amount0, amount1, data)

    def purse(self) -> URef:
        return self._swapper.purse()

    def package_hash(self) -> Any:
        return self._swapper.get_package_hash()


def deploy(
    runtime: Runtime,
    account: Key | bytes,
    contract_name: str,
    wcspr: Key,
    dai: Key,
    uniswap_v2_factory: Key,
) -> Key:
    """Install a flash swapper with a fresh purse; returns its contract hash."""
    contract = FlashSwapperContract(runtime)

    def constructor_args(contract_key: Key, package_key: Key) -> dict[str, Any]:
        return {
            "wcspr": wcspr,
            "dai": dai,
            "uniswap_v2_factory": uniswap_v2_factory,
            "contract_hash": contract_key,
            "package_hash": package_key,
            "purse": runtime.new_uref(0),
        }

    return _install(runtime, account, contract_name, contract, constructor_args)