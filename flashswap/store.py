"""Named-key storage of the flash swapper's configuration."""

from __future__ import annotations

from typing import Any

from .keys import Key
from .runtime import NONE, ContractContext, Revert, URef, user_error

SELF_CONTRACT_HASH = "self_contract_hash"
WCSPR = "wcspr"
DAI = "dai"
BTC = "btc"
CSPR = "cspr"
PERMISSIONED_PAIR_ADDRESS = "permissioned_pair_address"
UNISWAP_V2_FACTORY = "uniswap_v2_factory"
UNISWAP_V2_PAIR = "uniswap_v2_pair"
SELF_PURSE = "self_purse"
CONTRACT_PACKAGE_HASH = "contract_package_hash"

ABORT = 35


class SwapperStore:
    """Reads and writes the swapper's named keys through a contract context.

    Every getter reverts when its value was never set.
    """

    def __init__(self, context: ContractContext) -> None:
        self._context = context

    def _get(self, name: str) -> Any:
        value = self._context.get_key(name)
        if value is None:
            raise Revert(NONE)
        return value

    def _set(self, name: str, value: Any) -> None:
        self._context.set_key(name, value)

    def wcspr(self) -> Key:
        return self._get(WCSPR)

    def set_wcspr(self, wcspr: Key) -> None:
        self._set(WCSPR, wcspr)

    def dai(self) -> Key:
        return self._get(DAI)

    def set_dai(self, dai: Key) -> None:
        self._set(DAI, dai)

    def cspr(self) -> Key:
        return self._get(CSPR)

    def set_cspr(self, cspr: Key) -> None:
        self._set(CSPR, cspr)

    def permissioned_pair_address(self) -> Key:
        return self._get(PERMISSIONED_PAIR_ADDRESS)

    def set_permissioned_pair_address(self, address: Key) -> None:
        self._set(PERMISSIONED_PAIR_ADDRESS, address)

    def uniswap_v2_factory(self) -> Key:
        return self._get(UNISWAP_V2_FACTORY)

    def set_uniswap_v2_factory(self, factory: Key) -> None:
        self._set(UNISWAP_V2_FACTORY, factory)

    def uniswap_v2_pair(self) -> Key:
        return self._get(UNISWAP_V2_PAIR)

    def set_uniswap_v2_pair(self, pair: Key) -> None:
        self._set(UNISWAP_V2_PAIR, pair)

    def self_hash(self) -> Key:
        return self._get(SELF_CONTRACT_HASH)

    def set_self_hash(self, contract_hash: Key) -> None:
        self._set(SELF_CONTRACT_HASH, contract_hash)

    def self_purse(self) -> URef:
        """The contract's purse, stored directly as a named key."""
        stored = self._context.runtime.named_keys().get(SELF_PURSE)
        if stored is None:
            raise Revert(NONE)
        if not isinstance(stored, URef):
            raise Revert(user_error(ABORT))
        return stored

    def set_self_purse(self, purse: URef) -> None:
        self._context.runtime.named_keys()[SELF_PURSE] = purse

    def package_hash(self) -> Any:
        return self._get(CONTRACT_PACKAGE_HASH)

    def set_package_hash(self, package_hash: Any) -> None:
        self._set(CONTRACT_PACKAGE_HASH, package_hash)