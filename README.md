# flashswap

A flash-swapper contract and the small in-memory contract runtime it runs on,
in plain Python with no dependencies. The swapper borrows a token from a
constant-product pair and pays it back in one of three ways:

- in the same token (a simple flash loan),
- in a token traded against the wrapped native coin through one pair (a simple
  flash swap),
- in any other token through two pairs (a triangular flash swap).

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `flashswap.keys` holds `Key` and `KeyKind`. A key is a 32-byte account or hash
  address. `Key.account`, `Key.hash` and `Key.from_formatted_str` build keys.
  `Key.to_formatted_string` gives `account-hash-<hex>` or `hash-<hex>`, and
  `Key.to_bytes` gives a kind tag followed by the address. `key_to_str` and
  `keys_to_str` make dictionary item names. The second is a 32-byte blake2b
  digest of two keys.
- `flashswap.runtime` holds the storage and call machinery:
  - `Runtime` holds storage cells (`URef`, via `new_uref`, `read` and
    `write`), installed contracts (`install`) and the call stack.
  - `Runtime.session(account)` is a context manager that runs code as a call by
    an account. If the block raises, storage changes are rolled back.
  - `Runtime.call_contract(contract_hash, entry_point, args)` calls a public
    method of an installed contract with keyword arguments.
  - `Runtime.named_keys()` gives the named keys of the current account or
    contract.
  - Failures raise `Revert`, which carries a numeric `code`. Contract-defined
    errors use `user_error(n)`, which is 65536 + n.
  - `ContractContext` gives contract logic `get_caller`, `self_addr`, `get_key`
    and `set_key`.
  - `Dict` is a named dictionary in storage with `get`, `set` and `remove`.
    Each of these also comes in `_by_key` and `_by_keys` forms.
- `flashswap.admin` holds `AdminControl`, an admin set kept in a dictionary.
  `add_admin` and `disable_admin` revert with `user_error(20)` unless the caller
  is an admin.
- `flashswap.store` holds `SwapperStore`, the swapper's named values: wcspr, dai,
  cspr, factory, pair, permissioned pair, own hash, purse and package hash.
  Each getter reverts when its value was never set.
- `flashswap.payload` holds the data sent through a pair's `swap` and the
  repayment arithmetic:
  - `SwapPayload` and `TriangleData` encode and decode that data.
  - `SwapKind` and `FailureCode` are enums of swap kinds and error numbers.
  - `checked_add` and `checked_sub` do 256-bit arithmetic that reverts on
    overflow or underflow.
  - `loan_repayment(amount)` gives the amount plus a fee of `amount*3//997 + 1`.
  - `swap_repayment(pay, borrow, amount)` gives
    `1000*pay*amount // (997*borrow) + 1`.
- `flashswap.swapper` holds `FlashSwapper`, the contract logic: `init`,
  `start_swap`, the pair callback `uniswap_v2_call`, the per-kind start and
  execute steps, and an `execute` hook. `SwapError` lists its access-check
  error numbers.
- `flashswap.deploy` holds the installer:
  - `deploy(...)` installs a `FlashSwapperContract` under fresh random package
    and contract hashes.
  - It runs the constructor once, then records `<name>_package_hash`,
    `<name>_contract_hash`, their `_wrapped` forms and
    `<name>_package_access_token` in the account's named keys.
  - `entry_points()` lists the declared `EntryPoint`s.
- `flashswap.proxy` holds `ProxyContract` and `deploy_proxy`. This helper
  contract forwards `deposit`, `erc20_mint`, `balance_of`, `token0`, `token1`,
  `create_pair`, `sync` and `set_fee_to` calls to other contracts. It stores
  some results under the named keys `Balance`, `token0` and `token1`.

## Example

```python
from flashswap.deploy import deploy
from flashswap.keys import Key
from flashswap.runtime import Revert, Runtime

runtime = Runtime()
owner = Key.account(bytes(32))
wcspr = Key.hash(bytes([1]) * 32)
dai = Key.hash(bytes([2]) * 32)
factory = Key.hash(bytes([3]) * 32)

swapper = deploy(runtime, owner, "flash_swapper", wcspr, dai, factory)

with runtime.session(owner):
    assert runtime.named_keys()["flash_swapper_contract_hash"] == swapper
    purse = runtime.call_contract(swapper, "purse")

try:
    with runtime.session(owner):
        runtime.call_contract(swapper, "constructor", {
            "wcspr": wcspr, "dai": dai, "uniswap_v2_factory": factory,
            "contract_hash": swapper, "package_hash": swapper, "purse": purse,
        })
except Revert as err:
    print(err.code)  # the constructor is closed after deployment
```

## Custom logic

The swapper calls `execute` while it holds the borrowed tokens. To act on
them:

1. Subclass `FlashSwapper` and override `execute`.
2. Wrap your subclass in `FlashSwapperContract(runtime, swapper)`.

When `execute` returns, the contract must hold the amount to repay in the pay
token.

## What this package does not include

The package contains no token, pair or factory contracts. To run `start_swap`,
install your own objects on the same `Runtime`:

- The factory must answer `get_pair`.
- Each pair must answer `token0`, `token1` and `swap`. A pair's `swap` is
  expected to call back the swapper's `uniswap_v2_call`.
- Each token must answer `balance_of` and `transfer`. The wrapped coin must also
  answer `deposit` and `withdraw`.

A purse is only a storage cell, and the runtime moves no native coin. There is
no command-line program and no persistent storage: all state lives in the
`Runtime` object.