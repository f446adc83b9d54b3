"""NexaProc Sales Order Materializer tests."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2024, 3, 5, 9, 0, 0, tzinfo=timezone.utc)


def _actor(role="staff", actor_id="u-1"):
    from core.context import ActorContext

    return ActorContext(actor_id=actor_id, role=role)


def _manager():
    return _actor("manager", actor_id="m-1")


def _world():
    from core.config import InMemoryConfigStore, ProcurementRules
    from core.records import InMemoryRecordStore
    from core.time import FixedClock
    from engines.quotation.services import QuotationService
    from engines.sales_order.services import SalesOrderService

    store = InMemoryRecordStore()
    store.create("goods", {"name": "Bolt M8", "minimum_order_quantity": 0})
    store.create("goods", {"name": "Nut M8", "minimum_order_quantity": 0})
    store.create("rfqs", {"rfq_number": "RFQ-1", "status": "draft"})
    config = InMemoryConfigStore(ProcurementRules(tax_rate=Decimal("11")))
    clock = FixedClock(NOW)
    quotations = QuotationService(store=store, config_store=config, clock=clock)
    orders = SalesOrderService(store=store, config_store=config, clock=clock)
    return store, quotations, orders


QUOTED_GOODS = [
    {"good_id": "1", "name": "Bolt M8", "unit": "pcs", "qty": 10, "price": 700, "delivery_time": 7},
    {"good_id": "2", "name": "Nut M8", "unit": "pcs", "qty": 10, "price": 300, "delivery_time": 7},
]


def _quotation(quotations, status="process"):
    record = quotations.create_quotation({
        "company_name": "PT Maju Jaya",
        "pic_name": "Budi",
        "pic_email": "budi@maju.co.id",
        "pic_phone": "+6281234567",
        "goods": QUOTED_GOODS,
        "payment_time": "30 days",
        "rfq_id": "1",
    }, _actor()).record
    path = {"waiting": [], "negotiation": ["negotiation"], "process": ["negotiation", "process"]}
    for step in path[status]:
        assert quotations.update_quotation_status(record["id"], step, _manager()).is_accepted
    return record["id"]


class TestMaterializeRequest:
    def test_deadlines_must_be_sequence(self):
        from engines.sales_order.commands import SalesOrderMaterializeRequest

        with pytest.raises(TypeError):
            SalesOrderMaterializeRequest(quotation_id="1", deadlines=7)

    def test_edit_fields_restricted(self):
        from engines.sales_order.commands import SalesOrderEditRequest

        with pytest.raises(ValueError, match="not editable"):
            SalesOrderEditRequest(sales_order_id="1", fields={"grand_total": 0})


class TestMaterialize:
    def test_carries_quotation_over(self):
        store, quotations, orders = _world()
        qid = _quotation(quotations)
        outcome = orders.materialize_sales_order(
            qid, [14, 21], _actor(), delivery_address="Jl. Industri 5",
        )

        assert outcome.is_accepted
        order = outcome.record
        assert order["status"] == "ongoing"
        assert order["quotation_id"] == qid
        assert order["order_number"] == "0001/RGI/QTN/III/2024"
        assert order["payment_time"] == "30 days"
        assert [line["deadline_days"] for line in order["goods"]] == [Decimal("14"), Decimal("21")]
        assert order["total_amount"] == Decimal("10000")
        assert order["tax_amount"] == Decimal("1100")
        assert order["grand_total"] == Decimal("11100")

    def test_explicit_order_number(self):
        _, quotations, orders = _world()
        qid = _quotation(quotations)
        outcome = orders.materialize_sales_order(qid, [1, 1], _actor(), order_number="PO-778")
        assert outcome.record["order_number"] == "PO-778"

    def test_second_materialization_rejected(self):
        store, quotations, orders = _world()
        qid = _quotation(quotations)
        assert orders.materialize_sales_order(qid, [1, 1], _actor()).is_accepted

        outcome = orders.materialize_sales_order(qid, [1, 1], _manager())
        assert outcome.reason_code == "DUPLICATE_SALES_ORDER"
        assert len(store.list("sales_orders", quotation_id=qid)) == 1

    @pytest.mark.parametrize("status", ["waiting", "negotiation"])
    def test_quotation_must_be_in_process(self, status):
        _, quotations, orders = _world()
        qid = _quotation(quotations, status=status)
        outcome = orders.materialize_sales_order(qid, [1, 1], _actor())
        assert outcome.reason_code == "QUOTATION_NOT_IN_PROCESS"

    @pytest.mark.parametrize("deadlines", [[1], [1, ""], [1, -3], [1, "NaN"], [1, "Infinity"]])
    def test_one_deadline_per_line(self, deadlines):
        store, quotations, orders = _world()
        qid = _quotation(quotations)
        outcome = orders.materialize_sales_order(qid, deadlines, _actor())
        assert outcome.reason_code == "MISSING_DEADLINE"
        assert store.list("sales_orders") == []

    def test_zero_day_deadline_is_allowed(self):
        _, quotations, orders = _world()
        qid = _quotation(quotations)
        assert orders.materialize_sales_order(qid, [0, 0], _actor()).is_accepted

    def test_unknown_quotation(self):
        _, _, orders = _world()
        outcome = orders.materialize_sales_order("77", [1], _actor())
        assert outcome.reason_code == "QUOTATION_NOT_FOUND"

    def test_unchanged_goods_keep_quoted_totals(self):
        _, quotations, orders = _world()
        qid = _quotation(quotations)
        outcome = orders.materialize_sales_order(qid, [1, 1], _actor(), goods=QUOTED_GOODS)
        assert outcome.record["grand_total"] == Decimal("11100")

    def test_edited_goods_recompute_subtotal_only(self):
        _, quotations, orders = _world()
        qid = _quotation(quotations)
        edited = [dict(QUOTED_GOODS[0], qty=5), QUOTED_GOODS[1]]
        order = orders.materialize_sales_order(qid, [1, 1], _actor(), goods=edited).record

        assert order["goods"][0]["qty"] == Decimal("5")
        assert order["total_amount"] == Decimal("6500")
        assert order["tax_amount"] == Decimal("1100")
        assert order["grand_total"] == Decimal("11100")

    def test_activity_logged(self):
        store, quotations, orders = _world()
        qid = _quotation(quotations)
        order = orders.materialize_sales_order(qid, [1, 1], _actor()).record
        entries = store.list("activity_logs", entity_type="sales_orders", entity_id=order["id"])
        assert [e["event_type"] for e in entries] == ["sales_order.order.materialized.v1"]


class TestSalesOrderLifecycle:
    def _order(self):
        store, quotations, orders = _world()
        qid = _quotation(quotations)
        order = orders.materialize_sales_order(qid, [1, 1], _actor()).record
        return store, orders, order["id"]

    def test_edit_header(self):
        _, orders, soid = self._order()
        outcome = orders.edit_sales_order(
            soid, {"delivery_date": date(2024, 4, 1), "delivery_address": "Gudang B"}, _actor("admin"),
        )
        assert outcome.record["delivery_address"] == "Gudang B"
        assert outcome.record["last_edited_by"] == "u-1"

    def test_staff_cannot_request_payment(self):
        _, orders, soid = self._order()
        outcome = orders.update_sales_order_status(soid, "waiting payment", _actor())
        assert outcome.reason_code == "PERMISSION_DENIED"

    def test_waiting_payment_creates_invoice_and_locks(self):
        store, orders, soid = self._order()
        outcome = orders.update_sales_order_status(soid, "Waiting  Payment", _manager())

        assert outcome.record["status"] == "waiting payment"
        invoices = store.list("invoices", sales_order_id=soid)
        assert len(invoices) == 1
        assert invoices[0]["invoice_number"] == "0001/RGI/INV/III/2024"
        assert invoices[0]["status"] == "overdue"

        locked = orders.edit_sales_order(soid, {"delivery_address": "X"}, _manager())
        assert locked.reason_code == "SALES_ORDER_LOCKED"

    def test_done_is_final(self):
        _, orders, soid = self._order()
        assert orders.update_sales_order_status(soid, "done", _manager()).is_accepted
        outcome = orders.update_sales_order_status(soid, "ongoing", _manager())
        assert outcome.reason_code == "INVALID_STATUS_TRANSITION"

    @pytest.mark.parametrize("role", ["staff", "manager"])
    def test_waiting_payment_cannot_reopen(self, role):
        store, orders, soid = self._order()
        assert orders.update_sales_order_status(soid, "waiting payment", _manager()).is_accepted

        outcome = orders.update_sales_order_status(soid, "ongoing", _actor(role))

        assert outcome.reason_code == "INVALID_STATUS_TRANSITION"
        assert store.get("sales_orders", soid)["status"] == "waiting payment"

    def test_waiting_payment_closes_to_done(self):
        _, orders, soid = self._order()
        orders.update_sales_order_status(soid, "waiting payment", _manager())
        outcome = orders.update_sales_order_status(soid, "done", _manager())
        assert outcome.record["status"] == "done"

    @pytest.mark.parametrize("status", ["ongoing", "shipped"])
    def test_same_or_unknown_status(self, status):
        _, orders, soid = self._order()
        outcome = orders.update_sales_order_status(soid, status, _manager())
        assert outcome.reason_code == "INVALID_STATUS_TRANSITION"

    def test_unknown_order(self):
        _, orders, _ = self._order()
        outcome = orders.edit_sales_order("404", {"delivery_address": "X"}, _manager())
        assert outcome.reason_code == "SALES_ORDER_NOT_FOUND"
