"""Swap payloads passed through a pair's swap call, and repayment arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from .keys import Key, KeyKind
from .runtime import UNEXPECTED_KEY_VARIANT, Revert, user_error

U256_MAX = 2**256 - 1
_DECIMAL_DIGITS = frozenset("0123456789")
_BOOL_TEXT = {"true": True, "false": False}


class SwapKind(Enum):
    """Which flash operation a payload belongs to."""

    SIMPLE_LOAN = "simple_loan"
    SIMPLE_SWAP = "simple_swap"
    TRIANGULAR_SWAP = "triangular_swap"


class FailureCode(IntEnum):
    """User error numbers raised while setting up or repaying a flash swap."""

    PAIR_NOT_AVAILABLE = 0
    BORROW_TOKEN_NOT_AVAILABLE = 1
    PAY_TOKEN_NOT_AVAILABLE = 2
    AMOUNT_TOO_BIG = 3
    OVERFLOW = 4
    UNDERFLOW = 5


def _hash_hex(key: Key) -> str:
    if key.kind is not KeyKind.HASH:
        raise Revert(UNEXPECTED_KEY_VARIANT)
    return key.data.hex()


def _parse_hash(digits: str) -> Key:
    return Key.from_formatted_str(f"hash-{digits}")


def _parse_u256(text: str) -> int:
    if not text or not set(text) <= _DECIMAL_DIGITS:
        raise ValueError(f"not an unsigned integer: {text!r}")
    value = int(text)
    if value > U256_MAX:
        raise ValueError(f"integer too large: {text!r}")
    return value


def _parse_bool(text: str) -> bool:
    try:
        return _BOOL_TEXT[text]
    except KeyError:
        raise ValueError(f"not a boolean: {text!r}") from None


@dataclass(frozen=True)
class TriangleData:
    """The borrow pair and the amount of wcspr for the second leg of a triangular swap."""

    borrow_pair: Key
    amount_of_wcspr: int

    def encode(self) -> str:
        return f"{_hash_hex(self.borrow_pair)}.{self.amount_of_wcspr}"

    @classmethod
    def decode(cls, data: str) -> TriangleData:
        parts = data.split(".")
        if len(parts) < 2:
            raise ValueError(f"malformed triangle data: {data!r}")
        return cls(_parse_hash(parts[0]), _parse_u256(parts[1]))


@dataclass(frozen=True)
class SwapPayload:
    """Comma-separated data the swapper hands to a pair and gets back in its callback."""

    kind: SwapKind
    token_borrow: Key
    amount: int
    token_pay: Key
    is_borrowing_cspr: bool = False
    is_paying_cspr: bool = False
    triangle_data: str = ""
    user_data: str = ""

    def encode(self) -> str:
        return ",".join(
            (
                self.kind.value,
                _hash_hex(self.token_borrow),
                str(self.amount),
                _hash_hex(self.token_pay),
                str(bool(self.is_borrowing_cspr)).lower(),
                str(bool(self.is_paying_cspr)).lower(),
                self.triangle_data,
                self.user_data,
            )
        )

    @classmethod
    def decode(cls, data: str) -> SwapPayload:
        """Parse a payload; a kind other than the two simple ones means triangular.

        Only the first eight comma-separated fields are read.
        """
        parts = data.split(",")
        if len(parts) < 8:
            raise ValueError(f"payload has {len(parts)} fields, expected 8")
        try:
            kind = SwapKind(parts[0])
        except ValueError:
            kind = SwapKind.TRIANGULAR_SWAP
        return cls(
            kind=kind,
            token_borrow=_parse_hash(parts[1]),
            amount=_parse_u256(parts[2]),
            token_pay=_parse_hash(parts[3]),
            is_borrowing_cspr=_parse_bool(parts[4]),
            is_paying_cspr=_parse_bool(parts[5]),
            triangle_data=parts[6],
            user_data=parts[7],
        )


def _u256(value: int) -> int:
    if value > U256_MAX:
        raise OverflowError("arithmetic operation overflow")
    return value


def checked_add(a: int, b: int) -> int:
    """Add two 256-bit values, reverting with the overflow code if it does not fit."""
    total = a + b
    if total > U256_MAX:
        raise Revert(user_error(FailureCode.OVERFLOW))
    return total


def checked_sub(a: int, b: int) -> int:
    """Subtract, reverting with the underflow code if the result would be negative."""
    if b > a:
        raise Revert(user_error(FailureCode.UNDERFLOW))
    return a - b


def loan_repayment(amount: int) -> int:
    """Amount to repay a flash loan of ``amount``: the loan plus a 0.3% fee rounded up."""
    fee = checked_add(_u256(amount * 3) // 997, 1)
    return checked_add(amount, fee)


def swap_repayment(pair_balance_pay: int, pair_balance_borrow: int, amount: int) -> int:
    """Amount of the pay token owed for ``amount`` of the borrow token, fee included."""
    numerator = _u256(_u256(1000 * pair_balance_pay) * amount)
    denominator = _u256(997 * pair_balance_borrow)
    return checked_add(numerator // denominator, 1)