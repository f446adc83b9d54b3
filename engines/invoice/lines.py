"""
NexaProc Invoice Engine — Invoice Lines and Totals
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

from core.records.codec import to_decimal


def normalize_invoice_line(raw: dict) -> dict:
    return {
        "no": int(raw.get("no") or 0),
        "goods": raw.get("goods") or None,
        "description": raw.get("description") or None,
        "unit": raw.get("unit") or None,
        "qty": to_decimal(raw.get("qty")),
        "price": to_decimal(raw.get("price")),
        "subtotal": to_decimal(raw.get("subtotal")),
    }


def build_invoice_lines(order_lines: List[dict]) -> List[dict]:
    lines = []
    for index, item in enumerate(order_lines):
        qty = to_decimal(item.get("qty"))
        price = to_decimal(item.get("price"))
        lines.append({
            "no": index + 1,
            "goods": item.get("name") or None,
            "description": item.get("description") or None,
            "unit": item.get("unit") or None,
            "qty": qty,
            "price": price,
            "subtotal": qty * price,
        })
    return lines


def resolve_invoice_totals(order: dict, invoice_lines: List[dict]) -> dict:
    """Order totals win; line subtotals are the fallback."""
    subtotal = to_decimal(order.get("total_amount"), default=None)
    if subtotal is None:
        subtotal = sum((line["subtotal"] for line in invoice_lines), Decimal("0"))

    tax = to_decimal(order.get("tax_amount"))

    grand = to_decimal(order.get("grand_total"), default=None)
    if not grand:
        grand = subtotal + tax

    return {"total_amount": subtotal, "tax_amount": tax, "grand_total": grand}
