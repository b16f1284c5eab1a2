"""Flash swapper contract: borrow from a pair and repay with the same or another token."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from .keys import Key, KeyKind
from .payload import (
    FailureCode,
    SwapKind,
    SwapPayload,
    TriangleData,
    checked_sub,
    loan_repayment,
    swap_repayment,
)
from .runtime import UNEXPECTED_KEY_VARIANT, ContractContext, Revert, Runtime, URef, user_error
from .store import SwapperStore

ZERO_HASH = Key.hash(bytes(32))
_U128_MAX = 2**128 - 1


class SwapError(IntEnum):
    """User error numbers raised by the swapper's own checks."""

    ZERO_ADDRESS = 0
    PAIR_EXISTS = 1
    PERMISSIONED_PAIR_ACCESS = 2
    INVALID_CONTRACT_ADDRESS = 3


def _require_hash(key: Key) -> Key:
    if key.kind is not KeyKind.HASH:
        raise Revert(UNEXPECTED_KEY_VARIANT)
    return key


def _as_u128(amount: int) -> int:
    if amount > _U128_MAX:
        raise OverflowError("integer overflow when casting to u128")
    return amount


def _check(result: Any) -> None:
    """A called entry point returning an error code aborts with that code."""
    if result is not None:
        raise Revert(result)


class FlashSwapper(ContractContext):
    """Flash-borrows a token from a pair and pays it back, optionally in another token.

    Subclasses override :meth:`execute` with what to do while holding the borrowed tokens.
    """

    def __init__(self, runtime: Runtime) -> None:
        super().__init__(runtime)
        self.store = SwapperStore(self)

    def _call(self, contract: Key, entry_point: str, **args: Any) -> Any:
        return self.runtime.call_contract(_require_hash(contract), entry_point, args)

    def init(
        self,
        wcspr: Key,
        dai: Key,
        uniswap_v2_factory: Key,
        contract_hash: Key,
        package_hash: Any,
        purse: URef,
    ) -> None:
        self.store.set_wcspr(wcspr)
        self.store.set_cspr(ZERO_HASH)
        self.store.set_dai(dai)
        self.store.set_uniswap_v2_factory(uniswap_v2_factory)
        self.store.set_self_hash(contract_hash)
        self.store.set_package_hash(package_hash)
        self.store.set_self_purse(purse)

    def start_swap(self, token_borrow: Key, amount: int, token_pay: Key, user_data: str) -> None:
        """Borrow ``amount`` of ``token_borrow`` and repay in ``token_pay``; the zero hash means cspr."""
        cspr = self.store.cspr()
        wcspr = self.store.wcspr()
        is_borrowing_cspr = token_borrow == cspr
        if is_borrowing_cspr:
            token_borrow = wcspr
        is_paying_cspr = token_pay == cspr
        if is_paying_cspr:
            token_pay = wcspr

        if token_borrow == token_pay:
            self.simple_flash_loan(token_borrow, amount, is_borrowing_cspr, is_paying_cspr, user_data)
        elif wcspr in (token_borrow, token_pay):
            self.simple_flash_swap(
                token_borrow, amount, token_pay, is_borrowing_cspr, is_paying_cspr, user_data
            )
        else:
            self.triangular_flash_swap(token_borrow, amount, token_pay, user_data)

    def uniswap_v2_call(self, sender: Key, amount0: int, amount1: int, data: str) -> None:
        """Callback from a pair's swap; only the permissioned pair may call it."""
        permissioned_pair_address = self.store.permissioned_pair_address()
        caller = self.get_caller()
        if caller != permissioned_pair_address:
            raise Revert(user_error(SwapError.PERMISSIONED_PAIR_ACCESS))
        if sender != self.store.self_hash():
            raise Revert(user_error(SwapError.INVALID_CONTRACT_ADDRESS))

        payload = SwapPayload.decode(data)
        if payload.kind is SwapKind.SIMPLE_LOAN:
            self.simple_flash_loan_execute(
                payload.token_borrow,
                payload.amount,
                caller,
                payload.is_borrowing_cspr,
                payload.is_paying_cspr,
                payload.user_data,
            )
        elif payload.kind is SwapKind.SIMPLE_SWAP:
            self.simple_flash_swap_execute(
                payload.token_borrow,
                payload.amount,
                payload.token_pay,
                caller,
                payload.is_borrowing_cspr,
                payload.is_paying_cspr,
                payload.user_data,
            )
        else:
            self.triangular_flash_swap_execute(
                payload.token_borrow,
                payload.amount,
                payload.token_pay,
                payload.triangle_data,
                payload.user_data,
            )

    def _amounts_out(self, pair: Key, token: Key, amount: int) -> tuple[int, int]:
        token0 = self._call(pair, "token0")
        token1 = self._call(pair, "token1")
        return (amount if token == token0 else 0, amount if token == token1 else 0)

    def simple_flash_loan(
        self,
        token_borrow: Key,
        amount: int,
        is_borrowing_cspr: bool,
        is_paying_cspr: bool,
        user_data: str,
    ) -> None:
        """Start a flash loan repaid in the same token that is borrowed."""
        other_token = self.store.dai()
        wcspr = self.store.wcspr()
        factory = self.store.uniswap_v2_factory()
        if token_borrow != wcspr:
            other_token = wcspr
        pair = self._call(factory, "get_pair", token0=token_borrow, token1=other_token)
        self.store.set_permissioned_pair_address(pair)
        pair_address = self.store.permissioned_pair_address()
        if pair_address == ZERO_HASH:
            raise Revert(user_error(SwapError.ZERO_ADDRESS))

        amount0_out, amount1_out = self._amounts_out(pair_address, token_borrow, amount)
        data = SwapPayload(
            kind=SwapKind.SIMPLE_LOAN,
            token_borrow=token_borrow,
            amount=amount,
            token_pay=token_borrow,
            is_borrowing_cspr=is_borrowing_cspr,
            is_paying_cspr=is_paying_cspr,
            triangle_data="",
            user_data=user_data,
        ).encode()
        self._call(
            pair_address,
            "swap",
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=self.store.self_hash(),
            data=data,
        )

    def simple_flash_loan_execute(
        self,
        token_borrow: Key,
        amount: int,
        pair_address: Key,
        is_borrowing_cspr: bool,
        is_paying_cspr: bool,
        user_data: str,
    ) -> None:
        """Runs while holding the borrowed tokens; repays the loan plus fee to the pair."""
        wcspr = _require_hash(self.store.wcspr())
        cspr = self.store.cspr()
        if is_borrowing_cspr:
            _check(
                self._call(
                    wcspr, "withdraw", to_purse=self.store.self_purse(), amount=_as_u128(amount)
                )
            )
        amount_to_repay = loan_repayment(amount)
        token_borrowed = cspr if is_borrowing_cspr else token_borrow
        token_to_repay = cspr if is_paying_cspr else token_borrow

        self.execute(token_borrowed, amount, token_to_repay, amount_to_repay, user_data)

        if is_paying_cspr:
            _check(
                self._call(
                    wcspr,
                    "deposit",
                    purse=self.store.self_purse(),
                    amount=_as_u128(amount_to_repay),
                )
            )
        _check(self._call(token_borrow, "transfer", recipient=pair_address, amount=amount_to_repay))

    def simple_flash_swap(
        self,
        token_borrow: Key,
        amount: int,
        token_pay: Key,
        is_borrowing_cspr: bool,
        is_paying_cspr: bool,
        user_data: str,
    ) -> None:
        """Start a swap through the single pair of the borrow and pay tokens."""
        factory = self.store.uniswap_v2_factory()
        pair_address = self._call(factory, "get_pair", token0=token_borrow, token1=token_pay)
        self.store.set_permissioned_pair_address(pair_address)
        if pair_address == ZERO_HASH:
            raise Revert(user_error(FailureCode.PAIR_NOT_AVAILABLE))

        amount0_out, amount1_out = self._amounts_out(pair_address, token_borrow, amount)
        data = SwapPayload(
            kind=SwapKind.SIMPLE_SWAP,
            token_borrow=token_borrow,
            amount=amount,
            token_pay=token_pay,
            is_borrowing_cspr=is_borrowing_cspr,
            is_paying_cspr=is_paying_cspr,
            triangle_data="",
            user_data=user_data,
        ).encode()
        self._call(
            pair_address,
            "swap",
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=self.store.self_hash(),
            data=data,
        )

    def simple_flash_swap_execute(
        self,
        token_borrow: Key,
        amount: int,
        token_pay: Key,
        pair_address: Key,
        is_borrowing_cspr: bool,
        is_paying_cspr: bool,
        user_data: str,
    ) -> None:
        """Runs while holding the borrowed tokens; repays the pair in the pay token."""
        wcspr = _require_hash(self.store.wcspr())
        if is_borrowing_cspr:
            _check(
                self._call(
                    wcspr, "withdraw", to_purse=self.store.self_purse(), amount=_as_u128(amount)
                )
            )
        permissioned = self.store.permissioned_pair_address()
        balance_borrow = self._call(token_borrow, "balance_of", owner=permissioned)
        balance_pay = self._call(token_pay, "balance_of", owner=permissioned)
        amount_to_repay = swap_repayment(balance_pay, balance_borrow, amount)

        cspr = self.store.cspr()
        token_borrowed = cspr if is_borrowing_cspr else token_borrow
        token_to_repay = cspr if is_paying_cspr else token_pay

        self.execute(token_borrowed, amount, token_to_repay, amount_to_repay, user_data)

        if is_paying_cspr:
            _check(
                self._call(
                    wcspr,
                    "deposit",
                    purse=self.store.self_purse(),
                    amount=_as_u128(amount_to_repay),
                )
            )
        _check(self._call(token_pay, "transfer", recipient=pair_address, amount=amount_to_repay))

    def triangular_flash_swap(
        self, token_borrow: Key, amount: int, token_pay: Key, user_data: str
    ) -> None:
        """Borrow wcspr from the pay/wcspr pair and trade it for the borrow token."""
        factory = self.store.uniswap_v2_factory()
        wcspr = self.store.wcspr()
        borrow_pair = self._call(factory, "get_pair", token0=token_borrow, token1=wcspr)
        if borrow_pair == ZERO_HASH:
            raise Revert(user_error(FailureCode.BORROW_TOKEN_NOT_AVAILABLE))
        pay_pair = self._call(factory, "get_pair", token0=token_pay, token1=wcspr)
        self.store.set_permissioned_pair_address(pay_pair)
        if pay_pair == ZERO_HASH:
            raise Revert(user_error(FailureCode.PAY_TOKEN_NOT_AVAILABLE))

        balance_before = self._call(token_borrow, "balance_of", owner=borrow_pair)
        if balance_before < amount:
            raise Revert(user_error(FailureCode.AMOUNT_TOO_BIG))
        balance_after = checked_sub(balance_before, amount)
        balance_wcspr = self._call(wcspr, "balance_of", owner=borrow_pair)
        amount_of_wcspr = swap_repayment(balance_wcspr, balance_after, amount)
        self.triangular_flash_swap_helper(
            token_borrow, amount, token_pay, borrow_pair, pay_pair, amount_of_wcspr, user_data
        )

    def triangular_flash_swap_helper(
        self,
        token_borrow: Key,
        amount: int,
        token_pay: Key,
        borrow_pair_address: Key,
        pay_pair_address: Key,
        amount_of_wcspr: int,
        user_data: str,
    ) -> None:
        """Flash-borrow ``amount_of_wcspr`` wcspr from the pay pair."""
        _require_hash(pay_pair_address)
        wcspr = self.store.wcspr()
        amount0_out, amount1_out = self._amounts_out(pay_pair_address, wcspr, amount_of_wcspr)
        triangle = TriangleData(borrow_pair_address, amount_of_wcspr).encode()
        data = SwapPayload(
            kind=SwapKind.TRIANGULAR_SWAP,
            token_borrow=token_borrow,
            amount=amount,
            token_pay=token_pay,
            is_borrowing_cspr=False,
            is_paying_cspr=False,
            triangle_data=triangle,
            user_data=user_data,
        ).encode()
        self._call(
            pay_pair_address,
            "swap",
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=self.store.self_hash(),
            data=data,
        )

    def triangular_flash_swap_execute(
        self,
        token_borrow: Key,
        amount: int,
        token_pay: Key,
        triangle_data: str,
        user_data: str,
    ) -> None:
        """Trade the borrowed wcspr for the borrow token, run the user code, repay in the pay token."""
        triangle = TriangleData.decode(triangle_data)
        borrow_pair = triangle.borrow_pair
        amount0_out, amount1_out = self._amounts_out(borrow_pair, token_borrow, amount)

        wcspr = self.store.wcspr()
        _check(
            self._call(wcspr, "transfer", recipient=borrow_pair, amount=triangle.amount_of_wcspr)
        )
        self._call(
            borrow_pair,
            "swap",
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=self.store.self_hash(),
            data="",
        )

        pay_pair = self.store.permissioned_pair_address()
        balance_wcspr = self._call(wcspr, "balance_of", owner=pay_pair)
        balance_pay = self._call(token_pay, "balance_of", owner=pay_pair)
        amount_to_repay = swap_repayment(balance_pay, balance_wcspr, triangle.amount_of_wcspr)

        self.execute(token_borrow, amount, token_pay, amount_to_repay, user_data)

        _check(self._call(token_pay, "transfer", recipient=pay_pair, amount=amount_to_repay))

    def execute(
        self,
        token_borrow: Key,
        amount: int,
        token_pay: Key,
        amount_to_repay: int,
        user_data: str,
    ) -> None:
        """User logic run while the contract holds the borrowed tokens.

        By the time it returns, the contract must hold ``amount_to_repay`` of the pay token
        (or that much cspr in its purse when paying in cspr).
        """

    def purse(self) -> URef:
        return self.store.self_purse()

    def get_package_hash(self) -> Any:
        return self.store.package_hash()