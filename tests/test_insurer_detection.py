"""Tests for insurer detection from S3 objects and PDF text."""

import asyncio
from types import SimpleNamespace

import pytest

from policy_crm.core.config import settings
from policy_crm.services import insurer_detection
from policy_crm.services.insurer_detection import (
    detect_from_text,
    detect_insurer,
    insurer_from_object,
)


class TestInsurerFromObject:
    def test_metadata_wins(self):
        assert insurer_from_object("tata-bucket", "uploads/x.pdf", {"insurer": "DIGIT"}) == "DIGIT"

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("uploads/TATA_AIG/1_a.pdf", "TATA_AIG"),
            ("uploads/digit/1_a.pdf", "DIGIT"),
            ("uploads/Reliance/1_a.pdf", "RELIANCE_GENERAL"),
        ],
    )
    def test_key_keywords(self, key, expected):
        assert insurer_from_object("bucket", key) == expected

    def test_default(self):
        assert insurer_from_object("bucket", "uploads/other/1_a.pdf") == "TATA_AIG"


def test_detect_from_text():
    assert detect_from_text("Issued by Go Digit General Insurance Ltd") == "DIGIT"
    assert detect_from_text("TATA AIG GENERAL INSURANCE COMPANY LIMITED") == "TATA_AIG"
    assert detect_from_text("Some other insurer") is None
    assert detect_from_text("") is None


def test_unreadable_pdf_falls_back_to_selected():
    assert asyncio.run(detect_insurer(b"definitely not a pdf", "DIGIT")) == "DIGIT"


def test_text_detection_overrides_selection(monkeypatch):
    monkeypatch.setattr(insurer_detection, "extract_pdf_text", lambda _: "RELIANCE GENERAL INSURANCE")
    assert asyncio.run(detect_insurer(b"%PDF", "TATA_AIG")) == "RELIANCE_GENERAL"


def test_no_match_without_openai_keeps_selection(monkeypatch):
    monkeypatch.setattr(insurer_detection, "extract_pdf_text", lambda _: "Motor policy schedule")
    assert asyncio.run(detect_insurer(b"%PDF", "DIGIT")) == "DIGIT"


def _fake_openai(content: str):
    class FakeCompletions:
        async def create(self, **kwargs):
            message = SimpleNamespace(content=content)
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    class FakeClient:
        def __init__(self, **kwargs):
            self.chat = SimpleNamespace(completions=FakeCompletions())

    return FakeClient


@pytest.mark.parametrize(
    "content,expected",
    [
        ('{"insurer": "reliance_general"}', "RELIANCE_GENERAL"),
        ('{"insurer": "SOMEONE_ELSE"}', "DIGIT"),
        ('["TATA_AIG"]', "DIGIT"),
        ('"TATA_AIG"', "DIGIT"),
        ("not json", "DIGIT"),
    ],
)
def test_openai_classification(monkeypatch, content, expected):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(insurer_detection, "AsyncOpenAI", _fake_openai(content))
    monkeypatch.setattr(insurer_detection, "extract_pdf_text", lambda _: "Motor policy schedule")

    assert asyncio.run(detect_insurer(b"%PDF", "DIGIT")) == expected


def test_metadata_keys_are_matched_loosely():
    assert insurer_from_object("bucket", "uploads/x.pdf", {"Insurer": "RELIANCE_GENERAL"}) == "RELIANCE_GENERAL"
