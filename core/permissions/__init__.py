"""
NexaProc Permissions - Public API
=================================
"""

from core.permissions.constants import (
    KNOWN_ROLES,
    PRIVILEGED_ROLES,
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_OWNER,
    ROLE_STAFF,
    ROLE_SUPERADMIN,
)
from core.permissions.evaluator import (
    PermissionEvaluationResult,
    authorize,
    is_privileged,
)
from core.permissions.registry import ActionRule, resolve_action_rule

__all__ = [
    "KNOWN_ROLES",
    "PRIVILEGED_ROLES",
    "ROLE_STAFF",
    "ROLE_ADMIN",
    "ROLE_MANAGER",
    "ROLE_SUPERADMIN",
    "ROLE_OWNER",
    "ActionRule",
    "PermissionEvaluationResult",
    "authorize",
    "is_privileged",
    "resolve_action_rule",
]
