"""
NexaProc Command Layer — Rejection Model
===========================================
Structured rejection reasons for denied commands.

Every rejection must be:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Attributable (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for command rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'BELOW_MOQ').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Authorization ─────────────────────────────────────────
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_QUOTATION_OWNER = "NOT_QUOTATION_OWNER"

    # ── Quotation ─────────────────────────────────────────────
    QUOTATION_NOT_FOUND = "QUOTATION_NOT_FOUND"
    QUOTATION_LOCKED = "QUOTATION_LOCKED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    MISSING_CONTACT_FIELD = "MISSING_CONTACT_FIELD"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_PHONE = "INVALID_PHONE"
    GOOD_NOT_SELECTED = "GOOD_NOT_SELECTED"
    BELOW_MOQ = "BELOW_MOQ"
    MISSING_DELIVERY_TIME = "MISSING_DELIVERY_TIME"
    MISSING_QUANTITY = "MISSING_QUANTITY"
    MISSING_PRICE = "MISSING_PRICE"
    EMPTY_GOODS = "EMPTY_GOODS"

    # ── Sales order ───────────────────────────────────────────
    QUOTATION_NOT_IN_PROCESS = "QUOTATION_NOT_IN_PROCESS"
    DUPLICATE_SALES_ORDER = "DUPLICATE_SALES_ORDER"
    MISSING_DEADLINE = "MISSING_DEADLINE"
    SALES_ORDER_NOT_FOUND = "SALES_ORDER_NOT_FOUND"
    SALES_ORDER_LOCKED = "SALES_ORDER_LOCKED"

    # ── Fulfillment ───────────────────────────────────────────
    DELIVERY_NOT_FOUND = "DELIVERY_NOT_FOUND"
    DELIVERY_ORDER_MISMATCH = "DELIVERY_ORDER_MISMATCH"
    QTY_EXCEEDS_REMAINING = "QTY_EXCEEDS_REMAINING"
    EMPTY_DELIVERY = "EMPTY_DELIVERY"
    MISSING_DELIVERY_DATE = "MISSING_DELIVERY_DATE"
    MISSING_SHIP_ADDRESS = "MISSING_SHIP_ADDRESS"
    UNKNOWN_LINE = "UNKNOWN_LINE"
    INVALID_QUANTITY = "INVALID_QUANTITY"

    # ── Invoice ───────────────────────────────────────────────
    INVOICE_ALREADY_EXISTS = "INVOICE_ALREADY_EXISTS"
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"
    INVOICE_NOT_OVERDUE = "INVOICE_NOT_OVERDUE"
