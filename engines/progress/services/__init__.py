"""
NexaProc Progress Engine — Application Service
================================================
Read-only: no commands, no writes.
"""

from __future__ import annotations

import logging

from core.records.codec import decode_lines
from engines.fulfillment.ledger import build_shipped_map
from engines.progress.aggregator import OrderProgress, compute_order_progress

logger = logging.getLogger("nexaproc.progress")


class ProgressService:

    def __init__(self, *, store):
        self._store = store

    def get_order_progress(self, sales_order_id) -> OrderProgress:
        """Raises RecordNotFound for an unknown sales order."""
        order = self._store.get("sales_orders", sales_order_id)
        deliveries = self._store.list("delivery_orders", sales_order_id=order["id"])
        shipped = build_shipped_map(deliveries, order["id"])
        progress = compute_order_progress(order["id"], decode_lines(order.get("goods")), shipped)
        logger.debug(
            "Progress for sales order %s: %s%% over %d deliveries",
            order["id"], progress.overall_progress_percent, len(deliveries),
        )
        return progress
