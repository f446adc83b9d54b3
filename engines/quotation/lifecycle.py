"""
NexaProc Quotation Engine — Negotiation Lifecycle
===================================================

    waiting ───────┬──► negotiation ──┬──► process ──► success
    renegotiation ─┘        │         │
          │                 └──► reject
          └──► reject

renegotiation behaves exactly like waiting: it is where a quotation
lands when its offer is revised during negotiation.

process, success and reject freeze the quotation's fields. Only
process → success remains as a status move; everything after that
happens on the sales order.
"""

from __future__ import annotations

STATUS_WAITING = "waiting"
STATUS_NEGOTIATION = "negotiation"
STATUS_RENEGOTIATION = "renegotiation"
STATUS_PROCESS = "process"
STATUS_SUCCESS = "success"
STATUS_REJECT = "reject"

QUOTATION_STATUSES = frozenset({
    STATUS_WAITING,
    STATUS_NEGOTIATION,
    STATUS_RENEGOTIATION,
    STATUS_PROCESS,
    STATUS_SUCCESS,
    STATUS_REJECT,
})

# Spellings found on older records.
STATUS_ALIASES = {
    "rejected": STATUS_REJECT,
    "re-negotiating": STATUS_RENEGOTIATION,
}

EDITABLE_STATUSES = frozenset({
    STATUS_WAITING, STATUS_NEGOTIATION, STATUS_RENEGOTIATION,
})
TERMINAL_STATUSES = frozenset({STATUS_PROCESS, STATUS_SUCCESS, STATUS_REJECT})

TRANSITIONS = {
    STATUS_WAITING: frozenset({STATUS_NEGOTIATION, STATUS_REJECT}),
    STATUS_RENEGOTIATION: frozenset({STATUS_NEGOTIATION, STATUS_REJECT}),
    STATUS_NEGOTIATION: frozenset({STATUS_PROCESS, STATUS_REJECT}),
    STATUS_PROCESS: frozenset({STATUS_SUCCESS}),
    STATUS_SUCCESS: frozenset(),
    STATUS_REJECT: frozenset(),
}


def normalize_status(status) -> str:
    text = str(status or "").strip().lower()
    return STATUS_ALIASES.get(text, text)


def is_terminal(status) -> bool:
    return normalize_status(status) in TERMINAL_STATUSES


def is_editable(status) -> bool:
    return normalize_status(status) in EDITABLE_STATUSES


def can_transition(current, target) -> bool:
    allowed = TRANSITIONS.get(normalize_status(current), frozenset())
    return normalize_status(target) in allowed


def status_label(status, negotiation_round=None) -> str:
    """Display label, e.g. 'negotiation (2)' or 're-negotiating'."""
    normalized = normalize_status(status)
    if normalized == STATUS_RENEGOTIATION:
        return "re-negotiating"
    if normalized == STATUS_NEGOTIATION and negotiation_round:
        return f"negotiation ({int(negotiation_round)})"
    return normalized
