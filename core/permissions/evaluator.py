"""
NexaProc Permissions - Authorization Policy
===========================================
The single authorization decision point. Every mutating operation
consults `authorize()` before touching a record.

Order of checks (first failure wins):
    1. role is known
    2. action has a registered rule
    3. record is not in a locked status
    4. privileged-only actions / privileged target statuses
    5. ownership for non-privileged callers
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.permissions.constants import KNOWN_ROLES, PRIVILEGED_ROLES
from core.permissions.registry import resolve_action_rule


@dataclass(frozen=True)
class PermissionEvaluationResult:
    allowed: bool
    rejection_code: Optional[str] = None
    message: str = ""

    def to_rejection(self, policy_name: str = "authorize") -> Optional[RejectionReason]:
        if self.allowed:
            return None
        return RejectionReason(
            code=self.rejection_code or ReasonCode.PERMISSION_DENIED,
            message=self.message or "Not authorized.",
            policy_name=policy_name,
        )


def _allow() -> PermissionEvaluationResult:
    return PermissionEvaluationResult(allowed=True)


def _deny(code: str, message: str) -> PermissionEvaluationResult:
    return PermissionEvaluationResult(
        allowed=False,
        rejection_code=code,
        message=message,
    )


def is_privileged(actor) -> bool:
    return actor is not None and actor.role in PRIVILEGED_ROLES


def authorize(
    actor,
    action: str,
    record: Optional[dict] = None,
    *,
    target_status: Optional[str] = None,
) -> PermissionEvaluationResult:
    """Decide whether `actor` may perform `action` on `record`."""
    if actor is None or actor.role not in KNOWN_ROLES:
        role = getattr(actor, "role", None)
        return _deny(
            ReasonCode.PERMISSION_DENIED,
            f"Role '{role}' is not allowed to perform '{action}'.",
        )

    rule = resolve_action_rule(action)
    if rule is None:
        return _deny(
            ReasonCode.PERMISSION_DENIED,
            f"No authorization rule for action '{action}'.",
        )

    status = str((record or {}).get("status") or "").strip().lower()
    if record is not None and status in rule.locked_statuses:
        return _deny(
            rule.locked_code,
            f"Record is '{status}' and can no longer be changed ({action}).",
        )

    privileged = is_privileged(actor)
    if rule.privileged_only and not privileged:
        return _deny(
            ReasonCode.PERMISSION_DENIED,
            f"Only manager or superadmin may perform '{action}'.",
        )

    if target_status is not None and target_status in rule.privileged_targets and not privileged:
        return _deny(
            ReasonCode.PERMISSION_DENIED,
            f"Only manager or superadmin may set status '{target_status}'.",
        )

    if rule.owner_field and not privileged:
        owner = (record or {}).get(rule.owner_field)
        if owner in (None, "") or str(owner) != actor.actor_id:
            return _deny(
                rule.owner_code,
                f"Actor '{actor.actor_id}' did not create this record.",
            )

    return _allow()
