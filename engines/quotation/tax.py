"""
NexaProc Quotation Engine — Tax Computation
=============================================
Two modes, selected by the quotation's include_tax flag.

include_tax = False (tax added on top):
    tax          = S·r/100
    total_amount = S
    grand_total  = S + tax

include_tax = True (quoted prices already contain tax):
    tax          = S·r/(100+r)
    total_amount = S − tax
    grand_total  = S

S is Σ qty·price, r the tax rate in percent. Amounts are Decimal,
rounded to the cent (half-up) so total_amount + tax_amount == grand_total
holds exactly in both modes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from core.records.codec import to_decimal

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class QuotationTotals:
    subtotal: Decimal
    total_amount: Decimal
    tax_amount: Decimal
    grand_total: Decimal

    def as_fields(self) -> dict:
        return {
            "total_amount": self.total_amount,
            "tax_amount": self.tax_amount,
            "grand_total": self.grand_total,
        }


def raw_subtotal(lines: Iterable[dict]) -> Decimal:
    total = Decimal("0")
    for line in lines:
        total += to_decimal(line.get("qty")) * to_decimal(line.get("price"))
    return total


def compute_totals(lines: Iterable[dict], tax_rate, include_tax: bool) -> QuotationTotals:
    rate = to_decimal(tax_rate)
    if rate < 0:
        raise ValueError(f"tax_rate cannot be negative, got {rate}.")

    subtotal = quantize_money(raw_subtotal(lines))

    if include_tax:
        tax = quantize_money(subtotal * rate / (HUNDRED + rate))
        return QuotationTotals(
            subtotal=subtotal,
            total_amount=subtotal - tax,
            tax_amount=tax,
            grand_total=subtotal,
        )

    tax = quantize_money(subtotal * rate / HUNDRED)
    return QuotationTotals(
        subtotal=subtotal,
        total_amount=subtotal,
        tax_amount=tax,
        grand_total=subtotal + tax,
    )
