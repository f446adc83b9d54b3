"""
NexaProc Fulfillment Engine — Request Commands
================================================
One command covers both flows: a new delivery order, or an edit of an
existing one (delivery_id set).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.commands.base import Command, build_command

DELIVERY_COMMIT_REQUEST = "fulfillment.delivery.commit.request"

FULFILLMENT_COMMAND_TYPES = frozenset({
    DELIVERY_COMMIT_REQUEST,
})


@dataclass(frozen=True)
class DeliveryCommitRequest:
    """
    Ship quantities against a sales order.

    lines: dicts identifying an order line (good_id or name) plus qty.
    delivery_id: the delivery order being edited, None for a new one.
    """
    sales_order_id: str
    lines: tuple
    delivery_id: Optional[str] = None
    delivery_date: Optional[object] = None
    ship_address: Optional[str] = None

    def __post_init__(self):
        if not self.sales_order_id:
            raise ValueError("sales_order_id must be non-empty.")
        if not isinstance(self.lines, (list, tuple)):
            raise TypeError("lines must be a list or tuple of line dicts.")
        object.__setattr__(self, "lines", tuple(self.lines))
        for line in self.lines:
            if not isinstance(line, dict):
                raise TypeError("each delivery line must be a dict.")

    @property
    def is_edit(self) -> bool:
        return self.delivery_id is not None

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return build_command(
            command_type=DELIVERY_COMMIT_REQUEST,
            source_engine="fulfillment",
            payload={
                "sales_order_id": str(self.sales_order_id),
                "delivery_id": None if self.delivery_id is None else str(self.delivery_id),
                "lines": [dict(line) for line in self.lines],
                "delivery_date": self.delivery_date,
                "ship_address": self.ship_address,
            },
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )
