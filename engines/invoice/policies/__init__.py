"""
NexaProc Invoice Engine — Policies
====================================
"""

from __future__ import annotations

from typing import List, Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason

STATUS_OVERDUE = "overdue"
STATUS_PAID = "paid"


def one_invoice_per_order_policy(
    command: Command,
    existing_invoices: List[dict],
) -> Optional[RejectionReason]:
    if not existing_invoices:
        return None
    return RejectionReason(
        code=ReasonCode.INVOICE_ALREADY_EXISTS,
        message=(
            f"Sales order '{command.payload['sales_order_id']}' is already "
            f"invoiced ({existing_invoices[0].get('invoice_number')})."
        ),
        policy_name="one_invoice_per_order_policy",
    )


def invoice_must_be_overdue_policy(
    command: Command,
    invoice: dict,
) -> Optional[RejectionReason]:
    """Payment can only be confirmed once, from overdue to paid."""
    status = str(invoice.get("status") or "").strip().lower()
    if status == STATUS_OVERDUE:
        return None
    return RejectionReason(
        code=ReasonCode.INVOICE_NOT_OVERDUE,
        message=f"Invoice is '{status}'; only overdue invoices can be marked paid.",
        policy_name="invoice_must_be_overdue_policy",
    )
