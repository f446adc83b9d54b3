"""NexaProc Quotation Negotiation Engine tests."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2024, 3, 5, 9, 0, 0, tzinfo=timezone.utc)


def _actor(role="staff", actor_id="u-1"):
    from core.context import ActorContext

    return ActorContext(actor_id=actor_id, role=role)


def _manager():
    return _actor("manager", actor_id="m-1")


def _setup(tax_rate="11", command_bus=None):
    from core.config import InMemoryConfigStore, ProcurementRules
    from core.records import InMemoryRecordStore
    from core.time import FixedClock
    from engines.quotation.services import QuotationService

    store = InMemoryRecordStore()
    store.create("goods", {
        "name": "Bolt M8", "unit": "pcs", "price": Decimal("1000"), "minimum_order_quantity": 5,
    })
    store.create("rfqs", {"rfq_number": "RFQ-1", "status": "draft"})
    service = QuotationService(
        store=store,
        config_store=InMemoryConfigStore(ProcurementRules(tax_rate=Decimal(tax_rate))),
        clock=FixedClock(NOW),
        command_bus=command_bus,
    )
    return store, service


def _fields(**overrides):
    fields = {
        "company_name": "PT Maju Jaya",
        "pic_name": "Budi",
        "pic_email": "budi@maju.co.id",
        "pic_phone": "+6281234567",
        "goods": [{
            "good_id": "1", "name": "Bolt M8", "unit": "pcs",
            "qty": 10, "price": 1000, "delivery_time": 14,
        }],
        "include_tax": False,
        "payment_time": "30 days",
        "rfq_id": "1",
    }
    fields.update(overrides)
    return fields


def _line(**overrides):
    line = {"good_id": "1", "name": "Bolt M8", "qty": 10, "price": 1000, "delivery_time": 14}
    line.update(overrides)
    return line


class TestTax:
    def test_tax_added_on_top(self):
        from engines.quotation.tax import compute_totals

        totals = compute_totals([{"qty": 10, "price": 1000}], Decimal("11"), False)
        assert totals.total_amount == Decimal("10000")
        assert totals.tax_amount == Decimal("1100")
        assert totals.grand_total == Decimal("11100")

    def test_tax_included_in_prices(self):
        from engines.quotation.tax import compute_totals

        totals = compute_totals([{"qty": 10, "price": 1000}], Decimal("11"), True)
        assert totals.tax_amount == Decimal("990.99")
        assert totals.total_amount == Decimal("9009.01")
        assert totals.grand_total == Decimal("10000")
        assert totals.total_amount + totals.tax_amount == totals.grand_total

    def test_zero_rate(self):
        from engines.quotation.tax import compute_totals

        totals = compute_totals([{"qty": 3, "price": "2.50"}], 0, True)
        assert totals.tax_amount == Decimal("0")
        assert totals.grand_total == Decimal("7.50")

    def test_negative_rate_refused(self):
        from engines.quotation.tax import compute_totals

        with pytest.raises(ValueError):
            compute_totals([], Decimal("-1"), False)


class TestLifecycle:
    def test_transitions(self):
        from engines.quotation.lifecycle import can_transition

        assert can_transition("waiting", "negotiation")
        assert can_transition("renegotiation", "negotiation")
        assert can_transition("negotiation", "process")
        assert can_transition("process", "success")
        assert not can_transition("waiting", "process")
        assert not can_transition("reject", "waiting")

    def test_aliases(self):
        from engines.quotation.lifecycle import is_terminal, normalize_status, status_label

        assert normalize_status("Rejected") == "reject"
        assert is_terminal("rejected")
        assert status_label("re-negotiating") == "re-negotiating"
        assert status_label("negotiation", 2) == "negotiation (2)"


class TestQuotationRequests:
    def test_edit_rejects_unknown_fields(self):
        from engines.quotation.commands import QuotationEditRequest

        with pytest.raises(ValueError, match="not editable"):
            QuotationEditRequest(quotation_id="1", fields={"company_name": "X"})

    def test_include_tax_must_be_bool(self):
        from engines.quotation.commands import QuotationCreateRequest

        with pytest.raises(TypeError):
            QuotationCreateRequest(include_tax="yes")

    def test_create_to_command(self):
        from engines.quotation.commands import QuotationCreateRequest

        command = QuotationCreateRequest.from_fields(_fields(unknown="ignored")).to_command(
            actor=_actor(), command_id=uuid.uuid4(), correlation_id=uuid.uuid4(), issued_at=NOW,
        )
        assert command.command_type == "quotation.record.create.request"
        assert command.payload["goods"][0]["qty"] == Decimal("10")


class TestCreateQuotation:
    def test_create_computes_totals_and_number(self):
        store, service = _setup()
        outcome = service.create_quotation(_fields(), _actor())

        assert outcome.is_accepted
        record = outcome.record
        assert record["quotation_number"] == "0001/RGI/QTN/III/2024"
        assert record["status"] == "waiting"
        assert record["grand_total"] == Decimal("11100")
        assert record["performed_by"] == "u-1"
        assert record["goods"][0]["delivery_time"] == Decimal("14")
        assert store.get("rfqs", "1")["status"] == "process"

    def test_caller_totals_are_ignored(self):
        _, service = _setup()
        outcome = service.create_quotation(_fields(grand_total=1), _actor())
        assert outcome.record["grand_total"] == Decimal("11100")

    def test_create_with_tax_included(self):
        _, service = _setup()
        record = service.create_quotation(_fields(include_tax=True), _actor()).record
        assert record["tax_amount"] == Decimal("990.99")
        assert record["total_amount"] == Decimal("9009.01")

    def test_numbering_continues_after_legacy_numbers(self):
        store, service = _setup()
        store.create("quotations", {"quotation_number": "RGI-QTN-2024-0007"})
        store.create("quotations", {"quotation_number": "0008/RGI/QTN/II/2024"})

        assert service.next_quotation_number() == "0009/RGI/QTN/III/2024"
        outcome = service.create_quotation(_fields(), _actor())
        assert outcome.record["quotation_number"] == "0009/RGI/QTN/III/2024"

    def test_activity_logged(self):
        store, service = _setup()
        record = service.create_quotation(_fields(), _actor()).record
        entries = store.list("activity_logs", entity_type="quotations", entity_id=record["id"])
        assert len(entries) == 1
        assert entries[0]["action"] == "create"
        assert entries[0]["event_type"] == "quotation.record.created.v1"

    def test_placeholders_accepted_for_contact(self):
        _, service = _setup()
        outcome = service.create_quotation(_fields(pic_email="-", pic_phone="-"), _actor())
        assert outcome.is_accepted

    @pytest.mark.parametrize("overrides, code", [
        ({"company_name": " "}, "MISSING_CONTACT_FIELD"),
        ({"pic_email": "budi@"}, "INVALID_EMAIL"),
        ({"pic_phone": "081234567"}, "INVALID_PHONE"),
        ({"goods": []}, "EMPTY_GOODS"),
        ({"goods": [_line(good_id=None)]}, "GOOD_NOT_SELECTED"),
        ({"goods": [_line(good_id="99")]}, "GOOD_NOT_SELECTED"),
        ({"goods": [_line(qty=2)]}, "BELOW_MOQ"),
        ({"goods": [_line(delivery_time="")]}, "MISSING_DELIVERY_TIME"),
        ({"goods": [_line(delivery_time=-1)]}, "MISSING_DELIVERY_TIME"),
        ({"goods": [_line(qty="")]}, "MISSING_QUANTITY"),
        ({"goods": [_line(price="")]}, "MISSING_PRICE"),
        ({"goods": [_line(qty="Infinity")]}, "MISSING_QUANTITY"),
        ({"goods": [_line(qty="NaN")]}, "MISSING_QUANTITY"),
        ({"goods": [_line(price="sNaN")]}, "MISSING_PRICE"),
        ({"goods": [_line(price="-Infinity")]}, "MISSING_PRICE"),
        ({"goods": [_line(delivery_time="nan")]}, "MISSING_DELIVERY_TIME"),
    ])
    def test_submission_rejections(self, overrides, code):
        store, service = _setup()
        outcome = service.create_quotation(_fields(**overrides), _actor())

        assert outcome.is_rejected
        assert outcome.reason_code == code
        assert store.list("quotations") == []
        assert store.list("activity_logs") == []

    def test_zero_price_is_a_value(self):
        _, service = _setup()
        assert service.create_quotation(_fields(goods=[_line(price=0)]), _actor()).is_accepted

    def test_unknown_role_rejected(self):
        _, service = _setup()
        outcome = service.create_quotation(_fields(), _actor(role="guest"))
        assert outcome.reason_code == "PERMISSION_DENIED"

    def test_routes_through_command_bus(self):
        from core.commands import CommandBus

        bus = CommandBus()
        _, service = _setup(command_bus=bus)
        assert bus.is_registered("quotation.record.create.request")
        assert service.create_quotation(_fields(), _actor()).is_accepted


class TestNegotiation:
    def _created(self):
        store, service = _setup()
        record = service.create_quotation(_fields(), _actor()).record
        return store, service, record["id"]

    def test_round_increments_on_each_negotiation(self):
        _, service, qid = self._created()

        first = service.update_quotation_status(qid, "negotiation", _manager())
        assert first.record["negotiation_round"] == 1

        edited = service.edit_quotation(qid, {"goods": [_line(qty=20)]}, _actor())
        assert edited.record["status"] == "renegotiation"
        assert edited.record["grand_total"] == Decimal("22200")

        second = service.update_quotation_status(qid, "negotiation", _manager())
        assert second.record["negotiation_round"] == 2

    def test_edit_in_waiting_keeps_status(self):
        _, service, qid = self._created()
        outcome = service.edit_quotation(qid, {"include_tax": True}, _actor())
        assert outcome.record["status"] == "waiting"
        assert outcome.record["grand_total"] == Decimal("10000")
        assert outcome.record["last_edited_by"] == "u-1"

    def test_edit_by_other_staff_rejected(self):
        _, service, qid = self._created()
        outcome = service.edit_quotation(qid, {"payment_time": "60 days"}, _actor(actor_id="u-2"))
        assert outcome.reason_code == "NOT_QUOTATION_OWNER"

    def test_manager_may_edit_any_quotation(self):
        _, service, qid = self._created()
        assert service.edit_quotation(qid, {"payment_time": "60 days"}, _manager()).is_accepted

    def test_edit_revalidates_goods(self):
        _, service, qid = self._created()
        outcome = service.edit_quotation(qid, {"goods": [_line(qty=1)]}, _actor())
        assert outcome.reason_code == "BELOW_MOQ"

    def test_process_locks_quotation(self):
        _, service, qid = self._created()
        service.update_quotation_status(qid, "negotiation", _manager())
        assert service.update_quotation_status(qid, "process", _manager()).is_accepted

        outcome = service.edit_quotation(qid, {"payment_time": "60 days"}, _manager())
        assert outcome.reason_code == "QUOTATION_LOCKED"

    def test_invalid_transition(self):
        _, service, qid = self._created()
        outcome = service.update_quotation_status(qid, "process", _manager())
        assert outcome.reason_code == "INVALID_STATUS_TRANSITION"

    def test_staff_cannot_change_status(self):
        _, service, qid = self._created()
        outcome = service.update_quotation_status(qid, "negotiation", _actor())
        assert outcome.reason_code == "PERMISSION_DENIED"

    def test_unknown_quotation(self):
        _, service = _setup()
        outcome = service.update_quotation_status("42", "negotiation", _manager())
        assert outcome.reason_code == "QUOTATION_NOT_FOUND"

    def test_reject_from_waiting(self):
        store, service, qid = self._created()
        assert service.update_quotation_status(qid, "rejected", _manager()).record["status"] == "reject"
        actions = [e["action"] for e in store.list("activity_logs", entity_id=qid)]
        assert actions == ["create", "status"]
