"""
NexaProc Invoice Engine — Event Types and Payload Builders
============================================================
"""

from __future__ import annotations

from core.commands.base import Command

INVOICE_CREATED_V1 = "invoice.record.created.v1"
INVOICE_PAID_V1 = "invoice.payment.confirmed.v1"

INVOICE_EVENT_TYPES = (
    INVOICE_CREATED_V1,
    INVOICE_PAID_V1,
)

COMMAND_TO_EVENT_TYPE = {
    "invoice.record.create.request": INVOICE_CREATED_V1,
    "invoice.payment.confirm.request": INVOICE_PAID_V1,
}


def resolve_invoice_event_type(command_type: str) -> str | None:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


def build_invoice_created_payload(command: Command, invoice: dict) -> dict:
    return {
        "actor_id": command.actor_id,
        "command_id": str(command.command_id),
        "invoice_id": invoice["id"],
        "invoice_number": invoice["invoice_number"],
        "sales_order_id": invoice["sales_order_id"],
        "grand_total": str(invoice["grand_total"]),
    }


def build_invoice_paid_payload(command: Command, invoice: dict) -> dict:
    return {
        "actor_id": command.actor_id,
        "command_id": str(command.command_id),
        "invoice_id": invoice["id"],
        "sales_order_id": invoice.get("sales_order_id"),
        "paid_date": str(invoice.get("paid_date")),
    }
