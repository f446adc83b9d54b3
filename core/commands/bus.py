"""
NexaProc Command Layer — Command Bus
=======================================
Routes a Command to the engine service registered for its type.

The CommandBus:
- Orchestrates, does not decide (engines own their policies)
- Guarantees every handled command yields one CommandOutcome
- Logs every rejection with its reason code
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Protocol

from core.commands.base import Command, derive_rejection_event_type
from core.commands.outcomes import CommandOutcome

logger = logging.getLogger("nexaproc.commands")


class EngineServiceProtocol(Protocol):
    """Engine handler: executes a command and returns its outcome."""

    def execute(self, command: Command) -> CommandOutcome:
        ...


class CommandBusError(Exception):
    """Base error for command bus operations."""
    pass


class NoHandlerRegistered(CommandBusError):
    """No engine service handler registered for command type."""

    def __init__(self, command_type: str):
        self.command_type = command_type
        super().__init__(
            f"No engine service handler registered for "
            f"command type '{command_type}'."
        )


class CommandBus:
    """
    Usage:
        bus = CommandBus()
        QuotationService(store=store, rules=rules, command_bus=bus)
        outcome = bus.handle(command)
    """

    def __init__(self):
        self._handlers: Dict[str, Any] = {}

    def register_handler(self, command_type: str, handler: Any) -> None:
        if not command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{command_type}' must end with '.request'."
            )

        if not hasattr(handler, "execute") or not callable(handler.execute):
            raise TypeError("Handler must have callable .execute() method.")

        self._handlers[command_type] = handler
        logger.debug("Handler registered: %s", command_type)

    def is_registered(self, command_type: str) -> bool:
        return command_type in self._handlers

    def handle(self, command: Command) -> CommandOutcome:
        handler = self._handlers.get(command.command_type)
        if handler is None:
            raise NoHandlerRegistered(command.command_type)

        outcome = handler.execute(command)
        if outcome.is_rejected:
            logger.info(
                "%s for command %s (reason: %s)",
                derive_rejection_event_type(command.command_type),
                command.command_id,
                outcome.reason.code,
            )
        else:
            logger.info("Command %s ACCEPTED", command.command_id)
        return outcome
