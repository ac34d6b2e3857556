"""Price value object for quote-currency amounts."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Self


@dataclass(frozen=True)
class Price:
    """Immutable value object representing a price in a quote currency.

    Attributes:
        value: The decimal price value (must be finite and non-negative).
        currency: Lower-case quote currency code (default: usd).
    """

    value: Decimal
    currency: str = "usd"

    def __post_init__(self) -> None:
        """Validate price constraints after initialization."""
        if not self.value.is_finite():
            raise ValueError("Price must be a finite number")
        if self.value < 0:
            raise ValueError("Price cannot be negative")

    @classmethod
    def from_raw(cls, value: Any, currency: str = "usd") -> Self:
        """Create a Price from a raw JSON value (int, float or numeric string).

        Floats go through ``str`` first so 0.1 becomes Decimal("0.1") rather
        than its binary expansion.

        Raises:
            ValueError: If the value is missing, boolean or not numeric.
        """
        if value is None or isinstance(value, bool):
            raise ValueError(f"Not a price: {value!r}")
        try:
            amount = Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"Not a price: {value!r}") from e
        return cls(amount, currency.lower())


def format_amount(amount: Decimal) -> str:
    """Render a decimal in plain notation without trailing zeros.

    ``Decimal("50000.00000000")`` renders as ``"50000"`` and
    ``Decimal("0.2500")`` as ``"0.25"``.
    """
    text = format(amount.normalize(), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
