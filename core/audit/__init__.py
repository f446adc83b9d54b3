"""
NexaProc Core Audit — Public API
==================================
Append-only activity logging.
"""

from core.audit.functions import (
    ACTIVITY_COLLECTION,
    create_activity_entry,
    record_activity,
)
from core.audit.models import (
    ACTION_CREATE,
    ACTION_STATUS,
    ACTION_UPDATE,
    ActivityEntry,
)

__all__ = [
    "ACTION_CREATE",
    "ACTION_STATUS",
    "ACTION_UPDATE",
    "ACTIVITY_COLLECTION",
    "ActivityEntry",
    "create_activity_entry",
    "record_activity",
]
