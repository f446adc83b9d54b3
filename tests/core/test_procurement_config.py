"""NexaProc configuration, clock and activity log tests."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2024, 3, 5, 9, 0, 0, tzinfo=timezone.utc)


class TestProcurementRules:
    def test_defaults(self):
        from core.config import ProcurementRules

        rules = ProcurementRules()
        assert rules.tax_rate == Decimal("0")
        assert rules.company_code == "RGI"
        assert (rules.quotation_doc_code, rules.delivery_doc_code, rules.invoice_doc_code) == \
            ("QTN", "DO", "INV")

    def test_rate_is_coerced(self):
        from core.config import ProcurementRules

        assert ProcurementRules(tax_rate="11").tax_rate == Decimal("11")

    @pytest.mark.parametrize("rate", ["-1", "eleven"])
    def test_bad_rate(self, rate):
        from core.config import ProcurementRules

        with pytest.raises(ValueError):
            ProcurementRules(tax_rate=rate)

    def test_in_memory_store_changes_rate(self):
        from core.config import InMemoryConfigStore

        store = InMemoryConfigStore()
        store.set_tax_rate(12)
        assert store.get_rules().tax_rate == Decimal("12")

    def test_rules_from_settings(self, settings):
        from core.config import DjangoSettingsConfigStore

        settings.NEXAPROC_PROCUREMENT = {"TAX_RATE": "11", "COMPANY_CODE": "ACME"}
        rules = DjangoSettingsConfigStore().get_rules()
        assert rules.tax_rate == Decimal("11")
        assert rules.company_code == "ACME"


class TestFixedClock:
    def test_requires_aware_datetime(self):
        from core.time import FixedClock

        with pytest.raises(ValueError):
            FixedClock(datetime(2024, 3, 5))

    def test_advance(self):
        from core.time import FixedClock

        clock = FixedClock(NOW)
        clock.advance(days=40)
        assert clock.now().month == 4


class TestActivityLog:
    def test_entry_validates_action(self):
        from core.audit import create_activity_entry

        with pytest.raises(ValueError):
            create_activity_entry(
                actor_id="u-1", entity_type="quotations", entity_id=1,
                action="delete", description="x", occurred_at=NOW,
            )

    def test_record_activity_appends(self):
        from core.audit import ACTIVITY_COLLECTION, create_activity_entry, record_activity
        from core.records import InMemoryRecordStore

        store = InMemoryRecordStore()
        entry = create_activity_entry(
            actor_id=7, entity_type="quotations", entity_id=1,
            action="create", description="Created quotation", occurred_at=NOW,
            metadata={"grand_total": "11100"},
        )
        record = record_activity(store, entry)

        assert record["entity_id"] == "1"
        assert record["actor_id"] == "7"
        assert store.list(ACTIVITY_COLLECTION)[0]["metadata"] == {"grand_total": "11100"}
