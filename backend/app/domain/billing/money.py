"""
Exact decimal amount type.

Every monetary and distance computation behind bookings and tours goes
through `Money` so derived columns never drift the way binary floats do.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union

from backend.app.core.exceptions import InvalidAmountError

Number = Union[int, str, Decimal, float]

# Scale of every NUMERIC(.., 2) amount and distance column
CENT = Decimal("0.01")


def _to_decimal(value: Any, field: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(field, value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            # str() keeps floats at their shortest repr, 0.1 not 0.1000000000000000055
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmountError(field, value)
    else:
        raise InvalidAmountError(field, value)
    if not result.is_finite():
        raise InvalidAmountError(field, value, "must be a finite number")
    try:
        result.quantize(CENT)
    except InvalidOperation:
        raise InvalidAmountError(field, value, "is out of range")
    return result


class Money:
    """
    Immutable wrapper around `decimal.Decimal`, always held at the 2-place
    storage scale (ROUND_HALF_UP) so a derived column equals the arithmetic
    on the stored columns it is derived from.

    Usage:
        paid = Money.of(payload["amount_paid"], field="amount_paid", non_negative=True)
        outstanding = total - paid
    """

    __slots__ = ("_amount",)

    def __init__(self, amount: Decimal):
        self._amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)

    @classmethod
    def of(cls, value: Any, field: str = "amount", non_negative: bool = False) -> "Money":
        """
        Build from client or database input.

        Raises:
            InvalidAmountError: value is not numeric, or negative when
                `non_negative` is set.
        """
        if isinstance(value, Money):
            amount = value._amount
        else:
            amount = _to_decimal(value, field)
        if non_negative and amount < 0:
            raise InvalidAmountError(field, value, "must not be negative")
        return cls(amount)

    @classmethod
    def of_optional(cls, value: Any, field: str = "amount") -> "Money":
        """Stored columns may be NULL; those read as zero."""
        if value is None:
            return cls.zero()
        return cls.of(value, field)

    @classmethod
    def zero(cls) -> "Money":
        return cls(Decimal("0"))

    @property
    def amount(self) -> Decimal:
        return self._amount

    def __add__(self, other: "Money") -> "Money":
        return Money(self._amount + _coerce(other))

    def __sub__(self, other: "Money") -> "Money":
        return Money(self._amount - _coerce(other))

    def times(self, factor: Union["Money", Number]) -> "Money":
        """Multiply by a scalar (a rate, a km count, the round-trip factor)."""
        return Money(self._amount * _coerce(factor))

    def __gt__(self, other: "Money") -> bool:
        return self._amount > _coerce(other)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Money):
            return self._amount == other._amount
        if isinstance(other, (int, Decimal)):
            return self._amount == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._amount)

    def to_storage(self) -> Decimal:
        """Value written to a NUMERIC column."""
        return self._amount

    def __repr__(self) -> str:
        return f"Money({self._amount})"

    def __str__(self) -> str:
        return str(self._amount)


def _coerce(value: Union[Money, Number]) -> Decimal:
    if isinstance(value, Money):
        return value.amount
    return _to_decimal(value, "amount")


def optional_money(value: Optional[Any], field: str, non_negative: bool = False) -> Optional[Money]:
    """`Money.of` that passes None through, for optional inputs."""
    if value is None:
        return None
    return Money.of(value, field=field, non_negative=non_negative)
