"""
NexaProc Permissions - Action Rule Registry
============================================
One ActionRule per mutating action. `authorize()` is the only reader.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from core.commands.rejection import ReasonCode
from core.permissions.constants import (
    ACTION_DELIVERY_CREATE,
    ACTION_DELIVERY_EDIT,
    ACTION_INVOICE_CREATE,
    ACTION_INVOICE_PAY,
    ACTION_QUOTATION_CREATE,
    ACTION_QUOTATION_EDIT,
    ACTION_QUOTATION_STATUS_UPDATE,
    ACTION_SALES_ORDER_CREATE,
    ACTION_SALES_ORDER_EDIT,
    ACTION_SALES_ORDER_STATUS_UPDATE,
    QUOTATION_LOCKED_STATUSES,
    SALES_ORDER_LOCKED_STATUSES,
)


@dataclass(frozen=True)
class ActionRule:
    """
    privileged_only:     only PRIVILEGED_ROLES may act.
    owner_field:         record field naming the creator; non-privileged
                         callers must match it.
    locked_statuses:     record statuses in which the action is refused.
    privileged_targets:  target statuses only PRIVILEGED_ROLES may set.
    """
    privileged_only: bool = False
    owner_field: Optional[str] = None
    owner_code: str = ReasonCode.PERMISSION_DENIED
    locked_statuses: frozenset = field(default_factory=frozenset)
    locked_code: str = ReasonCode.PERMISSION_DENIED
    privileged_targets: frozenset = field(default_factory=frozenset)


ACTION_RULES = {
    ACTION_QUOTATION_CREATE: ActionRule(),
    ACTION_QUOTATION_EDIT: ActionRule(
        owner_field="performed_by",
        owner_code=ReasonCode.NOT_QUOTATION_OWNER,
        locked_statuses=QUOTATION_LOCKED_STATUSES,
        locked_code=ReasonCode.QUOTATION_LOCKED,
    ),
    ACTION_QUOTATION_STATUS_UPDATE: ActionRule(privileged_only=True),
    ACTION_SALES_ORDER_CREATE: ActionRule(),
    ACTION_SALES_ORDER_EDIT: ActionRule(
        locked_statuses=SALES_ORDER_LOCKED_STATUSES,
        locked_code=ReasonCode.SALES_ORDER_LOCKED,
    ),
    ACTION_SALES_ORDER_STATUS_UPDATE: ActionRule(
        privileged_targets=frozenset({"waiting payment", "done"}),
    ),
    ACTION_DELIVERY_CREATE: ActionRule(
        locked_statuses=SALES_ORDER_LOCKED_STATUSES,
        locked_code=ReasonCode.SALES_ORDER_LOCKED,
    ),
    ACTION_DELIVERY_EDIT: ActionRule(
        locked_statuses=SALES_ORDER_LOCKED_STATUSES,
        locked_code=ReasonCode.SALES_ORDER_LOCKED,
    ),
    ACTION_INVOICE_CREATE: ActionRule(),
    ACTION_INVOICE_PAY: ActionRule(),
}


def resolve_action_rule(action: str) -> Optional[ActionRule]:
    return ACTION_RULES.get(action)
