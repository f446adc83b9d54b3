"""
NexaProc Quotation Engine — Policies
======================================
Engine-specific validation policies for quotation submissions.
Each policy returns a RejectionReason or None; the service runs them
in order and the first rejection wins.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.records.codec import is_blank, to_decimal
from engines.quotation.commands import CONTACT_FIELDS
from engines.quotation.lifecycle import (
    STATUS_NEGOTIATION,
    can_transition,
    normalize_status,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+62\d{6,}$")
UNAVAILABLE_PLACEHOLDER = "-"

GoodLookup = Callable[[str], Optional[dict]]


# ══════════════════════════════════════════════════════════════
# CONTACT
# ══════════════════════════════════════════════════════════════

def contact_fields_required_policy(command: Command) -> Optional[RejectionReason]:
    for field_name in CONTACT_FIELDS:
        if is_blank(command.payload.get(field_name)):
            return RejectionReason(
                code=ReasonCode.MISSING_CONTACT_FIELD,
                message=f"Contact field '{field_name}' must be filled out.",
                policy_name="contact_fields_required_policy",
            )
    return None


def contact_email_format_policy(command: Command) -> Optional[RejectionReason]:
    email = command.payload.get("pic_email", "")
    if email == UNAVAILABLE_PLACEHOLDER or EMAIL_PATTERN.match(email):
        return None
    return RejectionReason(
        code=ReasonCode.INVALID_EMAIL,
        message=f"PIC email '{email}' is not a valid address (use '-' if unavailable).",
        policy_name="contact_email_format_policy",
    )


def contact_phone_format_policy(command: Command) -> Optional[RejectionReason]:
    phone = command.payload.get("pic_phone", "")
    if phone == UNAVAILABLE_PLACEHOLDER or PHONE_PATTERN.match(phone):
        return None
    return RejectionReason(
        code=ReasonCode.INVALID_PHONE,
        message=f"PIC phone '{phone}' must use +62 format (use '-' if unavailable).",
        policy_name="contact_phone_format_policy",
    )


# ══════════════════════════════════════════════════════════════
# GOODS
# ══════════════════════════════════════════════════════════════

def _submitted_goods(command: Command):
    if "changes" in command.payload:
        return command.payload["changes"].get("goods")
    return command.payload.get("goods")


def goods_required_policy(command: Command) -> Optional[RejectionReason]:
    goods = _submitted_goods(command)
    if goods is None and "changes" in command.payload:
        return None
    if not goods:
        return RejectionReason(
            code=ReasonCode.EMPTY_GOODS,
            message="A quotation must contain at least one goods line.",
            policy_name="goods_required_policy",
        )
    return None


def goods_must_be_selected_policy(
    command: Command,
    good_lookup: Optional[GoodLookup] = None,
) -> Optional[RejectionReason]:
    """Every line must reference a catalog good; free text is refused."""
    for index, line in enumerate(_submitted_goods(command) or ()):
        good_id = line.get("good_id")
        if is_blank(good_id):
            return RejectionReason(
                code=ReasonCode.GOOD_NOT_SELECTED,
                message=f"Line {index + 1} ('{line.get('name', '')}') must select goods from the catalog.",
                policy_name="goods_must_be_selected_policy",
            )
        if good_lookup is not None and good_lookup(good_id) is None:
            return RejectionReason(
                code=ReasonCode.GOOD_NOT_SELECTED,
                message=f"Line {index + 1} references unknown good '{good_id}'.",
                policy_name="goods_must_be_selected_policy",
            )
    return None


def goods_must_meet_moq_policy(
    command: Command,
    good_lookup: Optional[GoodLookup] = None,
) -> Optional[RejectionReason]:
    if good_lookup is None:
        return None

    for index, line in enumerate(_submitted_goods(command) or ()):
        good = good_lookup(line.get("good_id"))
        if good is None:
            continue
        minimum = to_decimal(good.get("minimum_order_quantity"))
        qty = to_decimal(line.get("qty"))
        if minimum > 0 and qty < minimum:
            return RejectionReason(
                code=ReasonCode.BELOW_MOQ,
                message=(
                    f"Line {index + 1}: quantity {qty} is below the minimum "
                    f"order quantity {minimum} for '{good.get('name', line.get('name'))}'."
                ),
                policy_name="goods_must_meet_moq_policy",
            )
    return None


def delivery_time_required_policy(command: Command) -> Optional[RejectionReason]:
    for index, line in enumerate(_submitted_goods(command) or ()):
        days = to_decimal(line.get("delivery_time"), default=None)
        if days is None or days < 0:
            return RejectionReason(
                code=ReasonCode.MISSING_DELIVERY_TIME,
                message=f"Line {index + 1}: delivery time (days) must be filled out and not negative.",
                policy_name="delivery_time_required_policy",
            )
    return None


def quantity_required_policy(command: Command) -> Optional[RejectionReason]:
    for index, line in enumerate(_submitted_goods(command) or ()):
        if to_decimal(line.get("qty"), default=None) is None:
            return RejectionReason(
                code=ReasonCode.MISSING_QUANTITY,
                message=f"Line {index + 1}: quantity must be filled out.",
                policy_name="quantity_required_policy",
            )
    return None


def price_required_policy(command: Command) -> Optional[RejectionReason]:
    for index, line in enumerate(_submitted_goods(command) or ()):
        if to_decimal(line.get("price"), default=None) is None:
            return RejectionReason(
                code=ReasonCode.MISSING_PRICE,
                message=f"Line {index + 1}: price must be filled out.",
                policy_name="price_required_policy",
            )
    return None


# ══════════════════════════════════════════════════════════════
# LIFECYCLE
# ══════════════════════════════════════════════════════════════

def status_transition_policy(
    command: Command,
    quotation: dict,
) -> Optional[RejectionReason]:
    current = normalize_status(quotation.get("status"))
    target = normalize_status(command.payload.get("status"))
    if can_transition(current, target):
        return None
    return RejectionReason(
        code=ReasonCode.INVALID_STATUS_TRANSITION,
        message=f"Quotation cannot move from '{current}' to '{target}'.",
        policy_name="status_transition_policy",
    )


def entering_negotiation(command: Command) -> bool:
    return normalize_status(command.payload.get("status")) == STATUS_NEGOTIATION


SUBMISSION_POLICIES = (
    goods_required_policy,
    goods_must_be_selected_policy,
    quantity_required_policy,
    price_required_policy,
    goods_must_meet_moq_policy,
    delivery_time_required_policy,
)

CONTACT_POLICIES = (
    contact_fields_required_policy,
    contact_email_format_policy,
    contact_phone_format_policy,
)

LOOKUP_POLICIES = frozenset({
    goods_must_be_selected_policy,
    goods_must_meet_moq_policy,
})
