from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    return Decimal(str(value or 0))


@dataclass(frozen=True)
class PriceQuote:
    total: Decimal
    discounted_total: Decimal
    discount: int = 0

    @property
    def savings(self) -> Decimal:
        return self.total - self.discounted_total


def total_price(unit_price, people: int) -> Decimal:
    price = to_decimal(unit_price)
    if price < 0:
        raise ValueError("Unit price cannot be negative")
    if people < 1:
        raise ValueError("Party size must be at least 1")
    return price * people


def discounted_price(total, discount: Optional[int]) -> Decimal:
    total = to_decimal(total)
    if not discount:
        return total
    if discount < 0 or discount > 100:
        raise ValueError("Discount must be between 0 and 100")
    return total - total * Decimal(discount) / HUNDRED


def quote(unit_price, people: int, discount: Optional[int] = None) -> PriceQuote:
    total = total_price(unit_price, people)
    return PriceQuote(
        total=total,
        discounted_total=discounted_price(total, discount),
        discount=discount or 0,
    )
