"""
NexaProc Core Config — Public API
"""

from core.config.rules import (
    DEFAULT_COMPANY_CODE,
    ConfigStore,
    DjangoSettingsConfigStore,
    InMemoryConfigStore,
    ProcurementRules,
    rules_from_settings,
)

__all__ = [
    "DEFAULT_COMPANY_CODE",
    "ConfigStore",
    "DjangoSettingsConfigStore",
    "InMemoryConfigStore",
    "ProcurementRules",
    "rules_from_settings",
]
