"""Tests for Textract block → policy field mapping."""

import pytest

from policy_crm.services.extraction import (
    build_key_value_map,
    compute_confidence,
    extract_policy_data,
    ocr_confidence,
    parse_date,
    parse_number,
)
from tests.helpers import kv_blocks, line_blocks


class TestParsing:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("₹ 1,23,456.50", 123456.5),
            ("Rs. 500", 500.0),
            ("15430", 15430.0),
            (42, 42.0),
            ("n/a", None),
            (None, None),
        ],
    )
    def test_parse_number(self, raw, expected):
        assert parse_number(raw) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("15/08/2024", "2024-08-15"),
            ("15-08-2024", "2024-08-15"),
            ("2024-08-15", "2024-08-15"),
            ("2024/08/15", "2024-08-15"),
            ("31/02/2024", None),
            ("soon", None),
        ],
    )
    def test_parse_date(self, raw, expected):
        assert parse_date(raw) == expected


class TestKeyValueMap:
    def test_labels_are_normalized(self):
        blocks = kv_blocks({"Policy No:": "P-100", "Total Premium": "12,000"})
        assert build_key_value_map(blocks) == {"policy no": "P-100", "total premium": "12,000"}

    def test_singular_entity_type_and_inline_text(self):
        blocks = [
            {
                "Id": "k", "BlockType": "KEY_VALUE_SET", "EntityType": "KEY", "Text": "IDV",
                "Relationships": [{"Type": "VALUE", "Ids": ["v"]}],
            },
            {"Id": "v", "BlockType": "KEY_VALUE_SET", "EntityType": "VALUE", "Text": "5,00,000"},
        ]
        assert build_key_value_map(blocks) == {"idv": "5,00,000"}

    def test_key_without_value_is_skipped(self):
        blocks = [
            {"Id": "k", "BlockType": "KEY_VALUE_SET", "EntityTypes": ["KEY"], "Text": "Remarks"},
        ]
        assert build_key_value_map(blocks) == {}


class TestConfidence:
    def test_formula(self):
        assert compute_confidence(0) == pytest.approx(0.3)
        assert compute_confidence(2) == pytest.approx(0.5)
        assert compute_confidence(4) == 0.7

    def test_capped(self):
        assert compute_confidence(7) == 0.95
        assert compute_confidence(30) == 0.95

    def test_ocr_confidence_is_mean_of_lines(self):
        blocks = line_blocks("a", confidence=90.0) + line_blocks("b", confidence=80.0)
        assert ocr_confidence(blocks) == 0.85
        assert ocr_confidence([]) == 0.0


class TestExtractPolicyData:
    def test_key_values_are_mapped_and_coerced(self):
        blocks = kv_blocks({
            "Policy Number": "TA/2025/001",
            "Registration No": "KA01AB1234",
            "Issue Date": "01/04/2025",
            "Total Premium": "₹ 12,500.00",
            "NCB": "20",
        })
        data = extract_policy_data(blocks, "TATA_AIG")

        assert data["policy_number"] == "TA/2025/001"
        assert data["vehicle_number"] == "KA01AB1234"
        assert data["issue_date"] == "2025-04-01"
        assert data["total_premium"] == 12500.0
        assert data["ncb"] == 20.0
        assert data["insurer"] == "TATA_AIG"
        assert data["source"] == "PDF_UPLOAD"
        assert data["confidence_score"] == 0.9

    def test_resolved_insurer_counts_as_a_found_field(self):
        blocks = kv_blocks({
            "Policy Number": "D-100",
            "Vehicle Number": "KA02CD5678",
            "Total Premium": "9,000",
            "Make": "Maruti",
        })
        assert extract_policy_data(blocks, "DIGIT")["confidence_score"] == 0.8
        assert extract_policy_data(blocks, None)["confidence_score"] == 0.7

    def test_insurer_patterns_fill_gaps(self):
        blocks = line_blocks(
            "TATA AIG General Insurance",
            "Policy No. 6201/12345 Vehicle No. MH 12 AB 3456",
            "Total Premium: Rs. 15,430",
        )
        data = extract_policy_data(blocks, "TATA_AIG")

        assert data["policy_number"] == "6201/12345"
        assert data["vehicle_number"] == "MH12AB3456"
        assert data["total_premium"] == 15430.0
        assert data["confidence_score"] == pytest.approx(0.7)

    def test_patterns_never_overwrite_key_values(self):
        blocks = kv_blocks({"Policy Number": "KV-123"}) + line_blocks(
            "Policy Number: ZZ-999",
            "Registration No: ka 01 ab 1234",
        )
        data = extract_policy_data(blocks, None)

        assert data["policy_number"] == "KV-123"
        assert data["vehicle_number"] == "KA01AB1234"

    def test_generic_dates_and_amounts(self):
        blocks = line_blocks(
            "Start Date: 01-04-2025 End Date: 31-03-2026",
            "IDV: 4,50,000 NCB: 25%",
        )
        data = extract_policy_data(blocks, "DIGIT")

        assert data["issue_date"] == "2025-04-01"
        assert data["expiry_date"] == "2026-03-31"
        assert data["idv"] == 450000.0
        assert data["ncb"] == 25.0

    def test_empty_blocks(self):
        data = extract_policy_data([], None)
        assert data["confidence_score"] == pytest.approx(0.3)
        assert data["insurer"] is None
