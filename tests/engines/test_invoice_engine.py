"""NexaProc Invoice Engine tests."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2024, 3, 5, 9, 0, 0, tzinfo=timezone.utc)


def _actor(role="manager", actor_id="m-1"):
    from core.context import ActorContext

    return ActorContext(actor_id=actor_id, role=role)


def _world():
    from core.config import InMemoryConfigStore
    from core.records import InMemoryRecordStore
    from core.records.codec import encode_lines
    from core.time import FixedClock
    from engines.invoice.services import InvoiceService

    store = InMemoryRecordStore()
    rfq = store.create("rfqs", {"status": "process"})
    quotation = store.create("quotations", {
        "quotation_number": "0001/RGI/QTN/III/2024",
        "rfq_id": rfq["id"],
        "payment_time": "45 days",
        "status": "process",
    })
    order = store.create("sales_orders", {
        "order_number": "PO-1",
        "quotation_id": quotation["id"],
        "client_id": "c-9",
        "company_name": "PT Maju Jaya",
        "delivery_address": "Jl. Industri 5",
        "payment_time": "",
        "goods": encode_lines([
            {"good_id": "1", "name": "Bolt M8", "unit": "pcs", "qty": 10, "price": 700},
            {"good_id": "2", "name": "Nut M8", "unit": "pcs", "qty": 10, "price": 300},
        ]),
        "total_amount": Decimal("10000"),
        "tax_amount": Decimal("1100"),
        "grand_total": Decimal("11100"),
        "status": "waiting payment",
    })
    clock = FixedClock(NOW)
    service = InvoiceService(store=store, config_store=InMemoryConfigStore(), clock=clock)
    return store, service, clock, order["id"]


class TestInvoiceLines:
    def test_build_lines(self):
        from engines.invoice.lines import build_invoice_lines

        lines = build_invoice_lines([{"name": "Bolt", "unit": "pcs", "qty": 3, "price": "2.5"}])
        assert lines == [{
            "no": 1, "goods": "Bolt", "description": None, "unit": "pcs",
            "qty": Decimal("3"), "price": Decimal("2.5"), "subtotal": Decimal("7.5"),
        }]

    def test_totals_fall_back_to_lines(self):
        from engines.invoice.lines import resolve_invoice_totals

        totals = resolve_invoice_totals({"tax_amount": ""}, [{"subtotal": Decimal("4")}])
        assert totals == {
            "total_amount": Decimal("4"), "tax_amount": Decimal("0"), "grand_total": Decimal("4"),
        }


class TestCreateInvoice:
    def test_invoice_copies_order(self):
        store, service, _, soid = _world()
        outcome = service.create_invoice_for_order(soid, _actor())

        invoice = outcome.record
        assert invoice["invoice_number"] == "0001/RGI/INV/III/2024"
        assert invoice["status"] == "overdue"
        assert invoice["payment_time"] == "45 days"
        assert invoice["billing_address"] == "Jl. Industri 5"
        assert invoice["invoice_date"] == date(2024, 3, 5)
        assert invoice["grand_total"] == Decimal("11100")
        assert [line["no"] for line in invoice["goods"]] == [1, 2]
        assert invoice["goods"][0]["subtotal"] == Decimal("7000")

    def test_one_invoice_per_order(self):
        store, service, _, soid = _world()
        service.create_invoice_for_order(soid, _actor())
        outcome = service.create_invoice_for_order(soid, _actor())
        assert outcome.reason_code == "INVOICE_ALREADY_EXISTS"
        assert len(store.list("invoices")) == 1

    def test_numbering_uses_highest_sequence(self):
        store, service, _, soid = _world()
        store.create("invoices", {"invoice_number": "0004/RGI/INV/I/2024", "sales_order_id": "x"})
        assert service.create_invoice_for_order(soid, _actor()).record["invoice_number"].startswith("0005/")

    def test_unknown_order(self):
        _, service, _, _ = _world()
        assert service.create_invoice_for_order("404", _actor()).reason_code == "SALES_ORDER_NOT_FOUND"


class TestMarkInvoicePaid:
    def test_payment_closes_the_chain(self):
        store, service, clock, soid = _world()
        invoice = service.create_invoice_for_order(soid, _actor()).record
        clock.advance(days=10)

        outcome = service.mark_invoice_paid(invoice["id"], _actor("staff", "u-1"))
        assert outcome.record["status"] == "paid"
        assert outcome.record["paid_date"] == date(2024, 3, 15)

        order = store.get("sales_orders", soid)
        quotation = store.get("quotations", order["quotation_id"])
        assert order["status"] == "done"
        assert quotation["status"] == "success"
        assert store.get("rfqs", quotation["rfq_id"])["status"] == "success"

    def test_paid_only_once(self):
        _, service, _, soid = _world()
        invoice = service.create_invoice_for_order(soid, _actor()).record
        service.mark_invoice_paid(invoice["id"], _actor())
        outcome = service.mark_invoice_paid(invoice["id"], _actor())
        assert outcome.reason_code == "INVOICE_NOT_OVERDUE"

    def test_unknown_invoice(self):
        _, service, _, _ = _world()
        assert service.mark_invoice_paid("404", _actor()).reason_code == "INVOICE_NOT_FOUND"

    def test_unknown_role(self):
        _, service, _, soid = _world()
        invoice = service.create_invoice_for_order(soid, _actor()).record
        outcome = service.mark_invoice_paid(invoice["id"], _actor("visitor", "v-1"))
        assert outcome.reason_code == "PERMISSION_DENIED"
