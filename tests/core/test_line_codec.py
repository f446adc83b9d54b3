"""NexaProc line-item codec tests."""

import json
import logging
from decimal import Decimal

import pytest


class TestScalars:
    def test_blank(self):
        from core.records.codec import is_blank

        assert is_blank(None)
        assert is_blank("  ")
        assert not is_blank(0)
        assert not is_blank("0")

    def test_to_decimal(self):
        from core.records.codec import to_decimal

        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal("") == Decimal("0")
        assert to_decimal("abc", default=None) is None
        assert to_decimal(True, default=None) is None
        assert to_decimal("NaN", default=None) is None
        assert to_decimal("sNaN", default=None) is None
        assert to_decimal("-Infinity") == Decimal("0")
        assert to_decimal(Decimal("Infinity"), default=None) is None


class TestLineKey:
    def test_good_id_wins(self):
        from core.records.codec import line_key

        assert line_key({"good_id": 7, "name": "Bolt"}) == "id:7"

    def test_name_is_normalized(self):
        from core.records.codec import line_key

        assert line_key({"name": "  Bolt   M8 "}) == line_key({"name": "bolt m8"})
        assert line_key({"good_id": "", "name": "Bolt M8"}) == "name:bolt m8"


class TestEncodeDecode:
    def test_envelope_shape(self):
        from core.records.codec import LINE_CODEC_VERSION, encode_lines

        raw = encode_lines([{"good_id": 7, "name": "Bolt", "qty": "10", "price": Decimal("1000")}])
        envelope = json.loads(raw)
        assert envelope["version"] == LINE_CODEC_VERSION
        assert envelope["lines"][0]["good_id"] == "7"
        assert envelope["lines"][0]["qty"] == "10"

    def test_decode_restores_decimals_and_keeps_blank(self):
        from core.records.codec import decode_lines, encode_lines

        lines = decode_lines(encode_lines([
            {"good_id": "1", "name": "Nut", "qty": "", "price": "2.5", "delivery_time": 14},
        ]))
        assert lines[0]["qty"] == ""
        assert lines[0]["price"] == Decimal("2.5")
        assert lines[0]["delivery_time"] == Decimal("14")

    def test_bare_json_array_is_accepted(self):
        from core.records.codec import decode_lines

        lines = decode_lines('[{"name": "Washer", "qty": 3, "price": 1}]')
        assert lines[0]["name"] == "Washer"
        assert lines[0]["qty"] == Decimal("3")
        assert lines[0]["good_id"] is None

    def test_already_decoded_list(self):
        from core.records.codec import decode_lines

        assert decode_lines([{"name": "Bolt", "qty": 1}])[0]["qty"] == Decimal("1")

    @pytest.mark.parametrize("raw", [None, "", "   ", "{not json", '{"version": 99, "lines": []}',
                                     '{"version": 1, "lines": "x"}', "42"])
    def test_corrupt_payloads_decode_to_empty(self, raw):
        from core.records.codec import decode_lines

        assert decode_lines(raw) == []

    def test_corruption_is_logged(self, caplog):
        from core.records.codec import decode_lines

        with caplog.at_level(logging.WARNING, logger="nexaproc.records"):
            decode_lines("{broken")
        assert any("Malformed" in record.message for record in caplog.records)

    def test_non_object_items_skipped(self):
        from core.records.codec import decode_lines

        assert len(decode_lines('[{"name": "A"}, 5, "x"]')) == 1

    def test_custom_normalizer(self):
        from core.records.codec import decode_lines, encode_lines

        def normalizer(raw):
            return {"no": int(raw.get("no") or 0)}

        assert decode_lines(encode_lines([{"no": "2", "extra": 1}], normalizer), normalizer) == [{"no": 2}]
