"""Domain service: Pricing Calculator.

A pure function from a collection of line items (plus the bill-level
discount and cash received, where the context has them) to a
``PricingBreakdown``. No I/O and no mutation: calling it twice on the same
input yields equal breakdowns.

Two policies exist:
  Prescription   - ``total = subtotal``; tax is applied downstream by billing.
  Point of sale  - ``tax = subtotal * rate``; ``total = subtotal - discount + tax``
                   and, when cash is received, ``change = received - total``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from rxdraft.domain.exceptions import ValidationError
from rxdraft.domain.model.draft import OrderContext
from rxdraft.domain.model.line_item import LineItem
from rxdraft.domain.model.value_objects import money2

DEFAULT_TAX_RATE = Decimal("0.10")


@dataclass(frozen=True)
class PricingPolicy:
    context: OrderContext
    tax_rate: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        if self.tax_rate < 0:
            raise ValidationError("Tax rate cannot be negative")

    @property
    def applies_tax(self) -> bool:
        return self.context is OrderContext.POINT_OF_SALE

    @staticmethod
    def prescription() -> PricingPolicy:
        return PricingPolicy(OrderContext.PRESCRIPTION)

    @staticmethod
    def point_of_sale(tax_rate: Decimal = DEFAULT_TAX_RATE) -> PricingPolicy:
        return PricingPolicy(OrderContext.POINT_OF_SALE, tax_rate)

    @staticmethod
    def for_context(
        context: OrderContext, tax_rate: Decimal = DEFAULT_TAX_RATE
    ) -> PricingPolicy:
        if context is OrderContext.POINT_OF_SALE:
            return PricingPolicy.point_of_sale(tax_rate)
        return PricingPolicy.prescription()


@dataclass(frozen=True)
class PricingBreakdown:
    """Totals for a draft. Amounts are Decimals rounded to cents.

    ``change`` may be negative: that means the cash received does not cover
    the total, which the caller flags rather than clamps.
    """

    subtotal: Decimal
    total: Decimal
    discount: Decimal | None = None
    tax: Decimal | None = None
    received: Decimal | None = None
    change: Decimal | None = None
    item_count: int = 0
    unit_count: int = 0

    @property
    def is_underpaid(self) -> bool:
        return self.change is not None and self.change < 0


def calculate_pricing(
    items: Iterable[LineItem],
    policy: PricingPolicy,
    discount: Decimal | None = None,
    received: Decimal | None = None,
) -> PricingBreakdown:
    """Compute the breakdown for *items* under *policy*.

    Unselected rows contribute zero by construction (their total is zero).
    """
    items = list(items)
    subtotal = money2(sum((item.total_price.amount for item in items), Decimal("0")))
    units = sum(item.quantity for item in items if item.is_selected)
    count = sum(1 for item in items if item.is_selected)

    if not policy.applies_tax:
        return PricingBreakdown(
            subtotal=subtotal,
            total=subtotal,
            item_count=count,
            unit_count=units,
        )

    discount_amount = money2(discount if discount is not None else 0)
    if discount_amount < 0:
        raise ValidationError("Discount cannot be negative")
    tax = money2(subtotal * policy.tax_rate)
    total = money2(subtotal - discount_amount + tax)

    change = None
    received_amount = None
    if received is not None:
        received_amount = money2(received)
        change = money2(received_amount - total)

    return PricingBreakdown(
        subtotal=subtotal,
        total=total,
        discount=discount_amount,
        tax=tax,
        received=received_amount,
        change=change,
        item_count=count,
        unit_count=units,
    )
