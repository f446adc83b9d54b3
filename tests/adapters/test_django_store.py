"""NexaProc Django record store tests (SQLite test database)."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from adapters.django_store.models import RecordLock
from adapters.django_store.repository import DjangoRecordStore
from core.config import InMemoryConfigStore, ProcurementRules
from core.context import ActorContext
from core.records import RecordNotFound, UnknownCollection
from core.time import FixedClock

pytestmark = pytest.mark.django_db(transaction=True)

NOW = datetime(2024, 3, 5, 9, 0, 0, tzinfo=timezone.utc)
STAFF = ActorContext(actor_id="u-1", role="staff")
MANAGER = ActorContext(actor_id="m-1", role="manager")


def test_create_and_get_round_trip() -> None:
    store = DjangoRecordStore()
    good = store.create("goods", {"name": "Bolt M8", "price": Decimal("12.50")})

    assert isinstance(good["id"], str)
    fetched = store.get("goods", good["id"])
    assert fetched["name"] == "Bolt M8"
    assert fetched["price"] == Decimal("12.50")
    assert fetched["minimum_order_quantity"] == 1


def test_get_missing_and_non_numeric_ids() -> None:
    store = DjangoRecordStore()
    with pytest.raises(RecordNotFound):
        store.get("quotations", "999")
    with pytest.raises(RecordNotFound):
        store.get("quotations", "abc")
    assert store.list("goods", id="abc") == []


def test_unknown_collection() -> None:
    with pytest.raises(UnknownCollection):
        DjangoRecordStore().list("suppliers")


def test_list_filters_and_update() -> None:
    store = DjangoRecordStore()
    first = store.create("delivery_orders", {"delivery_number": "A", "sales_order_id": "1"})
    store.create("delivery_orders", {"delivery_number": "B", "sales_order_id": "2"})

    assert [d["delivery_number"] for d in store.list("delivery_orders", sales_order_id=1)] == ["A"]

    updated = store.update("delivery_orders", first["id"], {"ship_address": "Gudang B"})
    assert updated["ship_address"] == "Gudang B"
    assert updated["delivery_number"] == "A"

    with pytest.raises(RecordNotFound):
        store.update("delivery_orders", "999", {"ship_address": "X"})


def test_critical_section_rolls_back_on_error() -> None:
    store = DjangoRecordStore()
    with pytest.raises(RuntimeError):
        with store.critical_section("sales_order:1"):
            store.create("delivery_orders", {"delivery_number": "A", "sales_order_id": "1"})
            raise RuntimeError("boom")

    assert store.list("delivery_orders") == []


def test_critical_section_creates_lock_row() -> None:
    store = DjangoRecordStore()
    with store.critical_section("numbering:invoices"):
        pass
    with store.critical_section("numbering:invoices"):
        pass
    assert RecordLock.objects.filter(key="numbering:invoices").count() == 1


def test_procurement_flow_end_to_end() -> None:
    from engines.fulfillment.services import FulfillmentService
    from engines.invoice.services import InvoiceService
    from engines.progress.services import ProgressService
    from engines.quotation.services import QuotationService
    from engines.sales_order.services import SalesOrderService

    store = DjangoRecordStore()
    config = InMemoryConfigStore(ProcurementRules(tax_rate=Decimal("11")))
    clock = FixedClock(NOW)
    quotations = QuotationService(store=store, config_store=config, clock=clock)
    invoices = InvoiceService(store=store, config_store=config, clock=clock)
    orders = SalesOrderService(
        store=store, config_store=config, clock=clock, invoice_service=invoices,
    )
    fulfillment = FulfillmentService(store=store, config_store=config, clock=clock)

    good = store.create("goods", {"name": "Bolt M8", "minimum_order_quantity": 10})
    rfq = store.create("rfqs", {"rfq_number": "RFQ-1"})
    store.create("quotations", {"quotation_number": "RGI-QTN-2024-0007"})

    created = quotations.create_quotation({
        "company_name": "PT Maju Jaya",
        "pic_name": "Budi",
        "pic_email": "-",
        "pic_phone": "+6281234567",
        "goods": [{"good_id": good["id"], "name": "Bolt M8", "qty": 50, "price": 200, "delivery_time": 5}],
        "rfq_id": rfq["id"],
    }, STAFF)
    assert created.is_accepted
    qid = created.record["id"]
    assert created.record["quotation_number"] == "0008/RGI/QTN/III/2024"
    assert created.record["grand_total"] == Decimal("11100")
    assert store.get("rfqs", rfq["id"])["status"] == "process"

    assert quotations.update_quotation_status(qid, "negotiation", MANAGER).is_accepted
    assert quotations.update_quotation_status(qid, "process", MANAGER).is_accepted

    materialized = orders.materialize_sales_order(qid, [14], STAFF, delivery_address="Jl. Industri 5")
    assert materialized.is_accepted
    soid = materialized.record["id"]
    assert orders.materialize_sales_order(qid, [14], STAFF).reason_code == "DUPLICATE_SALES_ORDER"

    first = fulfillment.commit_delivery(soid, [{"good_id": good["id"], "qty": 20}], STAFF,
                                        delivery_date=date(2024, 3, 6))
    second = fulfillment.commit_delivery(soid, [{"good_id": good["id"], "qty": 25}], STAFF,
                                         delivery_date=date(2024, 3, 7))
    assert first.is_accepted and second.is_accepted
    assert first.record["delivery_number"] == "0001/RGI/DO/III/2024"
    assert second.record["delivery_number"] == "0002/RGI/DO/III/2024"

    edit_view = fulfillment.get_remaining_for_edit_delivery(first.record["id"])
    assert edit_view.lines[0]["remaining_qty"] == Decimal("25")
    over = fulfillment.commit_delivery(soid, [{"good_id": good["id"], "qty": 26}], STAFF, first.record["id"])
    assert over.reason_code == "QTY_EXCEEDS_REMAINING"
    assert fulfillment.commit_delivery(
        soid, [{"good_id": good["id"], "qty": 25}], STAFF, first.record["id"],
    ).is_accepted

    assert store.get("sales_orders", soid)["status"] == "waiting approval"
    progress = ProgressService(store=store).get_order_progress(soid)
    assert progress.overall_progress_percent == Decimal("100")

    assert orders.update_sales_order_status(soid, "waiting payment", MANAGER).is_accepted
    invoice = store.list("invoices", sales_order_id=soid)[0]
    assert invoice["invoice_number"] == "0001/RGI/INV/III/2024"
    assert invoice["invoice_date"] == date(2024, 3, 5)

    assert invoices.mark_invoice_paid(invoice["id"], STAFF).is_accepted
    assert store.get("sales_orders", soid)["status"] == "done"
    assert store.get("quotations", qid)["status"] == "success"
    assert store.get("rfqs", rfq["id"])["status"] == "success"

    entries = store.list("activity_logs", entity_type="quotations", entity_id=qid)
    assert [e["action"] for e in entries] == ["create", "status", "status"]
