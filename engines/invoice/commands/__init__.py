"""
NexaProc Invoice Engine — Request Commands
============================================
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from core.commands.base import Command, build_command

INVOICE_CREATE_REQUEST = "invoice.record.create.request"
INVOICE_PAY_REQUEST = "invoice.payment.confirm.request"

INVOICE_COMMAND_TYPES = frozenset({
    INVOICE_CREATE_REQUEST,
    INVOICE_PAY_REQUEST,
})


@dataclass(frozen=True)
class InvoiceCreateRequest:
    """Bill a sales order. One invoice per order."""
    sales_order_id: str

    def __post_init__(self):
        if not self.sales_order_id:
            raise ValueError("sales_order_id must be non-empty.")

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return build_command(
            command_type=INVOICE_CREATE_REQUEST,
            source_engine="invoice",
            payload={"sales_order_id": str(self.sales_order_id)},
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )


@dataclass(frozen=True)
class InvoicePayRequest:
    """Confirm payment of an overdue invoice."""
    invoice_id: str

    def __post_init__(self):
        if not self.invoice_id:
            raise ValueError("invoice_id must be non-empty.")

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return build_command(
            command_type=INVOICE_PAY_REQUEST,
            source_engine="invoice",
            payload={"invoice_id": str(self.invoice_id)},
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )
