"""
NexaProc Documents - Numbering Public API
=========================================
"""

from core.documents.numbering.engine import (
    max_sequence_for_year,
    next_document_number,
    next_sequence,
)
from core.documents.numbering.models import (
    ROMAN_MONTHS,
    NumberingPolicy,
    roman_month,
)
from core.documents.numbering.parser import (
    VARIANT_CURRENT,
    VARIANT_LEGACY,
    ParsedNumber,
    Unrecognized,
    parse_document_number,
)

__all__ = [
    "NumberingPolicy",
    "ROMAN_MONTHS",
    "roman_month",
    "ParsedNumber",
    "Unrecognized",
    "VARIANT_CURRENT",
    "VARIANT_LEGACY",
    "parse_document_number",
    "max_sequence_for_year",
    "next_sequence",
    "next_document_number",
]
