"""
NexaProc Documents - Numbering Models
=======================================
NumberingPolicy: how one document type is numbered.

Current format:  NNNN/<company>/<doc>/<romanMonth>/<year>
                 e.g. 0008/RGI/QTN/III/2024
Legacy format:   <company>-<doc>-<year>-NNNN
                 e.g. RGI-QTN-2024-0007 (only where accept_legacy=True)

Sequences reset every calendar year.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ROMAN_MONTHS = (
    "I", "II", "III", "IV", "V", "VI",
    "VII", "VIII", "IX", "X", "XI", "XII",
)


def roman_month(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}.")
    return ROMAN_MONTHS[month - 1]


@dataclass(frozen=True)
class NumberingPolicy:
    """
    Fields:
        doc_code:      QTN, DO, INV ...
        company_code:  issuing company prefix (RGI).
        padding:       minimum digit width for the sequence.
        accept_legacy: also recognise <company>-<doc>-<year>-NNNN numbers
                       when computing the next sequence.
    """
    doc_code: str
    company_code: str = "RGI"
    padding: int = 4
    accept_legacy: bool = False

    def __post_init__(self):
        if not self.doc_code or "/" in self.doc_code:
            raise ValueError("doc_code must be non-empty and contain no '/'.")
        if not self.company_code or "/" in self.company_code:
            raise ValueError("company_code must be non-empty and contain no '/'.")
        if not isinstance(self.padding, int) or self.padding < 1:
            raise ValueError("padding must be int >= 1.")

    def format_number(self, sequence: int, issued_at: datetime) -> str:
        if not isinstance(sequence, int) or sequence < 1:
            raise ValueError("sequence must be int >= 1.")
        padded = str(sequence).zfill(self.padding)
        return (
            f"{padded}/{self.company_code}/{self.doc_code}/"
            f"{roman_month(issued_at.month)}/{issued_at.year}"
        )

    @property
    def legacy_stem(self) -> str:
        return f"{self.company_code}-{self.doc_code}-"
