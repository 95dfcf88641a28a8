"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from bookstore.domain.exceptions import ValidationError

_CENT = Decimal("0.01")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors. Amounts are kept
    unrounded; ``rounded()`` and ``__str__`` quantize to cents for display.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor, self.currency)

    def apply_discount(self, discount: Discount) -> Money:
        return self * (1 - discount.percent / _HUNDRED)

    # --- Display --------------------------------------------------------------

    def rounded(self) -> Decimal:
        """Amount rounded half-up to cents."""
        return self.amount.quantize(_CENT, rounding=ROUND_HALF_UP)

    def __str__(self) -> str:
        return f"${self.rounded()}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))


@dataclass(frozen=True)
class Discount:
    """A percentage discount between 0 and 100 inclusive."""

    percent: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.percent, Decimal) or not self.percent.is_finite():
            raise ValidationError(f"Discount must be a finite Decimal, got {self.percent!r}")
        if self.percent < 0:
            raise ValidationError("Discount cannot be negative")
        if self.percent > _HUNDRED:
            raise ValidationError("Discount cannot exceed 100%")

    def __str__(self) -> str:
        return f"{self.percent.normalize():f}%"

    @staticmethod
    def of(percent: str | float | int | Decimal) -> Discount:
        try:
            return Discount(Decimal(str(percent)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid discount: {percent!r}") from exc

    @staticmethod
    def none() -> Discount:
        return Discount(Decimal("0"))


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be greater than 0")

    def __str__(self) -> str:
        return str(self.value)
