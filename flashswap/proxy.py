"""Helper contract that forwards calls to tokens, pairs and factories and records results."""

from __future__ import annotations

from typing import Any

from .deploy import _ConstructorGuard, _install
from .keys import Key, KeyKind
from .runtime import NONE, UNEXPECTED_KEY_VARIANT, ContractContext, Revert, Runtime

NAME = "name"
SELF_CONTRACT_HASH = "self_contract_hash"
PROXY_NAME = "TEST"


class ProxyContract(ContractContext):
    """Contract logic that calls other contracts on behalf of a session."""

    def _call(self, target: Key, entry_point: str, **args: Any) -> Any:
        if target.kind is not KeyKind.HASH:
            raise Revert(UNEXPECTED_KEY_VARIANT)
        return self.runtime.call_contract(target, entry_point, args)

    def _required(self, name: str) -> Any:
        value = self.get_key(name)
        if value is None:
            raise Revert(NONE)
        return value

    def init(self, name: str, contract_hash: Key) -> None:
        self.set_key(NAME, name)
        self.set_key(SELF_CONTRACT_HASH, contract_hash)

    def name(self) -> str:
        return self._required(NAME)

    def self_hash(self) -> Key:
        return self._required(SELF_CONTRACT_HASH)

    def mint_with_caller(self, caller: Key, recipient: Key, amount: int) -> None:
        self._call(caller, "deposit", to=recipient, amount=amount)

    def pair_mint(self, caller: Key, recipient: Key, amount: int) -> None:
        self._call(caller, "erc20_mint", to=recipient, amount=amount)

    def balance(self, token: Key, owner: Key) -> None:
        """Store the token balance of ``owner`` under the named key ``Balance``."""
        self.set_key("Balance", self._call(token, "balance_of", owner=owner))

    def token0(self, pair: Key) -> None:
        self.set_key("token0", self._call(pair, "token0"))

    def token1(self, pair: Key) -> None:
        self.set_key("token1", self._call(pair, "token1"))

    def create_pair(self, token_a: Key, token_b: Key, pair_hash: Key, factory_hash: Key) -> None:
        self._call(
            factory_hash, "create_pair", token_a=token_a, token_b=token_b, pair_hash=pair_hash
        )

    def sync(self, pair_hash: Key) -> None:
        self._call(pair_hash, "sync")

    def set_fee_to(self, fee_to: Key, factory_hash: Key) -> None:
        self._call(factory_hash, "set_fee_to", fee_to=fee_to)


class _ProxyEntryPoints(_ConstructorGuard):
    """The proxy as installed, taking its arguments under their entry-point names."""

    def __init__(self, runtime: Runtime) -> None:
        super().__init__()
        self._proxy = ProxyContract(runtime)

    def constructor(self, name: str, contract_hash: Key | bytes) -> None:
        self._check_constructor_access()
        key = contract_hash if isinstance(contract_hash, Key) else Key.hash(contract_hash)
        self._proxy.init(name, key)

    def set_fee_to(self, fee_to: Key, factory_hash: Key) -> None:
        self._proxy.set_fee_to(fee_to, factory_hash)

    def mint_with_caller(self, caller: Key, to: Key, amount: int) -> None:
        self._proxy.mint_with_caller(caller, to, amount)

    def pair_mint(self, caller: Key, to: Key, amount: int) -> None:
        self._proxy.pair_mint(caller, to, amount)

    def balance(self, token: Key, owner: Key) -> None:
        self._proxy.balance(token, owner)

    def token0(self, pair: Key) -> None:
        self._proxy.token0(pair)

    def token1(self, pair: Key) -> None:
        self._proxy.token1(pair)

    def create_pair(self, token_a: Key, token_b: Key, pair_hash: Key, factory_hash: Key) -> None:
        self._proxy.create_pair(token_a, token_b, pair_hash, factory_hash)

    def sync(self, pair_hash: Key) -> None:
        self._proxy.sync(pair_hash)


def deploy_proxy(runtime: Runtime, account: Key | bytes, contract_name: str) -> Key:
    """Install the proxy contract; returns its contract hash."""
    contract = _ProxyEntryPoints(runtime)

    def constructor_args(contract_key: Key, package_key: Key) -> dict[str, Any]:
        return {"name": PROXY_NAME, "contract_hash": contract_key}

    return _install(runtime, account, contract_name, contract, constructor_args)