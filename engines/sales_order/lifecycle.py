"""
NexaProc Sales Order Engine — Status Model
============================================

    ongoing ──► on-delivery ──► waiting approval ──► waiting payment ──► done

on-delivery and waiting approval are driven by delivery commits:
a commit leaves the order in waiting approval once every ordered line
is fully shipped, otherwise in on-delivery. waiting payment and done
are set by privileged roles only, and freeze the order.
"""

from __future__ import annotations

STATUS_ONGOING = "ongoing"
STATUS_ON_DELIVERY = "on-delivery"
STATUS_WAITING_APPROVAL = "waiting approval"
STATUS_WAITING_PAYMENT = "waiting payment"
STATUS_DONE = "done"

SALES_ORDER_STATUSES = frozenset({
    STATUS_ONGOING,
    STATUS_ON_DELIVERY,
    STATUS_WAITING_APPROVAL,
    STATUS_WAITING_PAYMENT,
    STATUS_DONE,
})

LOCKED_STATUSES = frozenset({STATUS_WAITING_PAYMENT, STATUS_DONE})
FINAL_STATUSES = frozenset({STATUS_DONE})

# Orders that may receive a new delivery.
ACCEPTS_NEW_DELIVERY = frozenset({STATUS_ONGOING, STATUS_ON_DELIVERY})
# Orders whose existing deliveries may still be corrected.
ACCEPTS_DELIVERY_EDIT = frozenset({
    STATUS_ONGOING, STATUS_ON_DELIVERY, STATUS_WAITING_APPROVAL,
})


def normalize_order_status(status) -> str:
    return " ".join(str(status or "").strip().lower().split())


def is_locked(status) -> bool:
    return normalize_order_status(status) in LOCKED_STATUSES


def delivery_status_for(fully_shipped: bool) -> str:
    return STATUS_WAITING_APPROVAL if fully_shipped else STATUS_ON_DELIVERY
