"""NexaProc command, outcome and command bus tests."""

import uuid
from datetime import datetime, timezone

import pytest

NOW = datetime(2024, 3, 5, 9, 0, 0, tzinfo=timezone.utc)


def _command(command_type="quotation.status.update.request", source_engine="quotation", **overrides):
    from core.commands import Command

    fields = dict(
        command_id=uuid.uuid4(),
        command_type=command_type,
        actor_id="u-1",
        actor_role="manager",
        payload={"quotation_id": "1", "status": "negotiation"},
        issued_at=NOW,
        correlation_id=uuid.uuid4(),
        source_engine=source_engine,
    )
    fields.update(overrides)
    return Command(**fields)


class StubHandler:
    def __init__(self, outcome_factory):
        self.calls = []
        self._outcome_factory = outcome_factory

    def execute(self, command):
        self.calls.append(command)
        return self._outcome_factory(command)


class TestCommand:
    def test_valid(self):
        assert _command().actor_role == "manager"

    def test_type_must_end_with_request(self):
        with pytest.raises(ValueError, match=".request"):
            _command(command_type="quotation.status.update")

    def test_namespace_must_match_engine(self):
        with pytest.raises(ValueError, match="namespace"):
            _command(source_engine="sales_order")

    def test_payload_must_be_dict(self):
        with pytest.raises(TypeError):
            _command(payload=[])

    def test_rejection_event_type(self):
        from core.commands import derive_rejection_event_type

        assert derive_rejection_event_type("quotation.status.update.request") == \
            "quotation.status.update.rejected"


class TestOutcome:
    def test_rejected_requires_reason(self):
        from core.commands import CommandOutcome, CommandStatus

        with pytest.raises(ValueError):
            CommandOutcome(
                command_id=uuid.uuid4(), status=CommandStatus.REJECTED, reason=None, occurred_at=NOW,
            )

    def test_reject_helper(self):
        from core.commands import RejectionReason, reject

        outcome = reject(_command(), occurred_at=NOW, reason=RejectionReason(
            code="BELOW_MOQ", message="too few", policy_name="moq",
        ))
        assert outcome.is_rejected
        assert outcome.reason_code == "BELOW_MOQ"
        assert outcome.record is None


class TestCommandBus:
    def test_routes_to_handler(self):
        from core.commands import CommandBus, accept

        bus = CommandBus()
        handler = StubHandler(lambda c: accept(c, occurred_at=NOW, record={"id": "1"}))
        bus.register_handler("quotation.status.update.request", handler)

        outcome = bus.handle(_command())
        assert outcome.is_accepted
        assert len(handler.calls) == 1

    def test_unregistered_type_raises(self):
        from core.commands import CommandBus, NoHandlerRegistered

        with pytest.raises(NoHandlerRegistered):
            CommandBus().handle(_command())

    def test_handler_needs_execute(self):
        from core.commands import CommandBus

        with pytest.raises(TypeError):
            CommandBus().register_handler("quotation.status.update.request", object())
