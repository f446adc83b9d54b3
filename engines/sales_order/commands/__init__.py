"""
NexaProc Sales Order Engine — Request Commands
================================================
Typed sales order requests that convert into canonical Command objects.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.commands.base import Command, build_command
from core.records.codec import normalize_lines


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

SALES_ORDER_MATERIALIZE_REQUEST = "sales_order.order.materialize.request"
SALES_ORDER_EDIT_REQUEST = "sales_order.order.edit.request"
SALES_ORDER_STATUS_UPDATE_REQUEST = "sales_order.status.update.request"

SALES_ORDER_COMMAND_TYPES = frozenset({
    SALES_ORDER_MATERIALIZE_REQUEST,
    SALES_ORDER_EDIT_REQUEST,
    SALES_ORDER_STATUS_UPDATE_REQUEST,
})

EDITABLE_FIELDS = frozenset({
    "order_number", "order_date", "delivery_date", "delivery_address",
})


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SalesOrderMaterializeRequest:
    """
    Turn a quotation in 'process' into its one sales order.

    deadlines holds one deadline (days) per quotation line, by index.
    goods, when given, replaces the quotation's lines (operator edit).
    """
    quotation_id: str
    deadlines: tuple
    order_number: Optional[str] = None
    goods: Optional[tuple] = None
    delivery_address: str = ""
    order_date: Optional[object] = None

    def __post_init__(self):
        if not self.quotation_id:
            raise ValueError("quotation_id must be non-empty.")
        if not isinstance(self.deadlines, (list, tuple)):
            raise TypeError("deadlines must be a list or tuple.")
        object.__setattr__(self, "deadlines", tuple(self.deadlines))
        if self.goods is not None:
            if not isinstance(self.goods, (list, tuple)):
                raise TypeError("goods must be a list or tuple of line dicts.")
            object.__setattr__(self, "goods", tuple(self.goods))

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return build_command(
            command_type=SALES_ORDER_MATERIALIZE_REQUEST,
            source_engine="sales_order",
            payload={
                "quotation_id": str(self.quotation_id),
                "deadlines": list(self.deadlines),
                "order_number": self.order_number,
                "goods": None if self.goods is None else normalize_lines(self.goods),
                "delivery_address": self.delivery_address or "",
                "order_date": self.order_date,
            },
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )


@dataclass(frozen=True)
class SalesOrderEditRequest:
    """Correct header fields of an open sales order."""
    sales_order_id: str
    fields: dict

    def __post_init__(self):
        if not self.sales_order_id:
            raise ValueError("sales_order_id must be non-empty.")
        if not isinstance(self.fields, dict) or not self.fields:
            raise ValueError("fields must be a non-empty dict.")
        unknown = set(self.fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(
                f"Fields {sorted(unknown)} are not editable; "
                f"editable: {sorted(EDITABLE_FIELDS)}."
            )

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return build_command(
            command_type=SALES_ORDER_EDIT_REQUEST,
            source_engine="sales_order",
            payload={
                "sales_order_id": str(self.sales_order_id),
                "changes": dict(self.fields),
            },
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )


@dataclass(frozen=True)
class SalesOrderStatusUpdateRequest:
    sales_order_id: str
    status: str

    def __post_init__(self):
        if not self.sales_order_id:
            raise ValueError("sales_order_id must be non-empty.")
        if not self.status or not isinstance(self.status, str):
            raise ValueError("status must be a non-empty string.")

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return build_command(
            command_type=SALES_ORDER_STATUS_UPDATE_REQUEST,
            source_engine="sales_order",
            payload={
                "sales_order_id": str(self.sales_order_id),
                "status": self.status,
            },
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )
