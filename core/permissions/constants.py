"""
NexaProc Permissions - Roles and Actions
========================================
"""

from __future__ import annotations

# ── Roles (supplied by the identity collaborator) ─────────────
ROLE_STAFF = "staff"
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_SUPERADMIN = "superadmin"
ROLE_OWNER = "owner"  # seeded system owner, treated as superadmin

KNOWN_ROLES = frozenset({
    ROLE_STAFF, ROLE_ADMIN, ROLE_MANAGER, ROLE_SUPERADMIN, ROLE_OWNER,
})

PRIVILEGED_ROLES = frozenset({ROLE_MANAGER, ROLE_SUPERADMIN, ROLE_OWNER})

# ── Actions ───────────────────────────────────────────────────
ACTION_QUOTATION_CREATE = "quotation.create"
ACTION_QUOTATION_EDIT = "quotation.edit"
ACTION_QUOTATION_STATUS_UPDATE = "quotation.status.update"
ACTION_SALES_ORDER_CREATE = "sales_order.create"
ACTION_SALES_ORDER_EDIT = "sales_order.edit"
ACTION_SALES_ORDER_STATUS_UPDATE = "sales_order.status.update"
ACTION_DELIVERY_CREATE = "delivery.create"
ACTION_DELIVERY_EDIT = "delivery.edit"
ACTION_INVOICE_CREATE = "invoice.create"
ACTION_INVOICE_PAY = "invoice.pay"

# ── Statuses that freeze a record for editing ─────────────────
QUOTATION_LOCKED_STATUSES = frozenset({"process", "success", "reject", "rejected"})
SALES_ORDER_LOCKED_STATUSES = frozenset({"waiting payment", "done"})
