"""
NexaProc Core Config — Admin-Configurable Rules
=================================================
Tax rate and document codes are data, not code. They come from the
settings collaborator (the company settings row), never from engine
source.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Protocol


DEFAULT_COMPANY_CODE = "RGI"


# ══════════════════════════════════════════════════════════════
# PROCUREMENT RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProcurementRules:
    """
    tax_rate is a percentage: Decimal("11") means 11 %.
    Document codes build numbers like 0001/RGI/QTN/III/2024.
    """

    tax_rate: Decimal = Decimal("0")
    company_code: str = DEFAULT_COMPANY_CODE
    quotation_doc_code: str = "QTN"
    delivery_doc_code: str = "DO"
    invoice_doc_code: str = "INV"

    def __post_init__(self) -> None:
        try:
            rate = Decimal(str(self.tax_rate))
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"tax_rate must be numeric, got {self.tax_rate!r}.") from exc
        if rate < 0:
            raise ValueError(f"tax_rate cannot be negative, got {rate}.")
        object.__setattr__(self, "tax_rate", rate)

        if not self.company_code or "/" in self.company_code:
            raise ValueError("company_code must be non-empty and contain no '/'.")


# ══════════════════════════════════════════════════════════════
# CONFIG STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class ConfigStore(Protocol):
    def get_rules(self) -> ProcurementRules:
        ...  # pragma: no cover


class InMemoryConfigStore:
    """Config store for tests and bootstrap."""

    def __init__(self, rules: Optional[ProcurementRules] = None) -> None:
        self._rules = rules or ProcurementRules()

    def get_rules(self) -> ProcurementRules:
        return self._rules

    def set_tax_rate(self, tax_rate) -> None:
        self._rules = ProcurementRules(
            tax_rate=Decimal(str(tax_rate)),
            company_code=self._rules.company_code,
            quotation_doc_code=self._rules.quotation_doc_code,
            delivery_doc_code=self._rules.delivery_doc_code,
            invoice_doc_code=self._rules.invoice_doc_code,
        )


class DjangoSettingsConfigStore:
    """Reads settings.NEXAPROC_PROCUREMENT on every call."""

    def get_rules(self) -> ProcurementRules:
        return rules_from_settings()


def rules_from_settings() -> ProcurementRules:
    from django.conf import settings

    block = getattr(settings, "NEXAPROC_PROCUREMENT", {}) or {}
    return ProcurementRules(
        tax_rate=Decimal(str(block.get("TAX_RATE", 0) or 0)),
        company_code=block.get("COMPANY_CODE", DEFAULT_COMPANY_CODE),
    )
