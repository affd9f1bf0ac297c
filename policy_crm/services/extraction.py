"""
Textract block → policy field mapper.

Input is the raw ``Blocks`` list from ``GetDocumentAnalysis`` (FORMS + TABLES).
Three passes fill the policy dict, each one only touching fields still empty:

1. **Key/value pairs**: ``KEY_VALUE_SET`` blocks resolved to label → text
   and matched against :data:`FIELD_ALIASES`.
2. **Insurer patterns**: label layouts specific to TATA AIG and Digit
   schedules, run over the concatenated LINE text.
3. **Generic patterns**: policy number, Indian registration number, dates,
   IDV, NCB %, total premium.

The confidence score is a simple function of how many fields were found.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any

from policy_crm.core.config import settings
from policy_crm.domain.policy import SOURCE_PDF_UPLOAD

logger = logging.getLogger(__name__)

__all__ = [
    "FIELD_ALIASES",
    "build_key_value_map",
    "compute_confidence",
    "extract_policy_data",
    "lines_text",
    "ocr_confidence",
    "parse_date",
    "parse_number",
]

# ---------------------------------------------------------------------------
# Field alias table (lower-case label → policy field); first alias present wins
# ---------------------------------------------------------------------------

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "policy_number": ("policy number", "policy no", "policy no.", "policy"),
    "vehicle_number": (
        "vehicle number", "vehicle no", "vehicle no.", "registration no",
        "registration number", "reg no",
    ),
    "insurer": ("insurer", "insurance company", "company"),
    "product_type": ("product type", "product"),
    "vehicle_type": ("vehicle type", "type"),
    "make": ("make", "brand"),
    "model": ("model",),
    "cc": ("cc", "engine cc", "engine capacity"),
    "manufacturing_year": ("manufacturing year", "mfg year", "year"),
    "issue_date": ("issue date", "start date", "inception date", "policy start"),
    "expiry_date": ("expiry date", "end date", "policy end"),
    "idv": ("idv", "insured declared value", "sum insured"),
    "ncb": ("ncb", "no claim bonus", "ncb discount"),
    "discount": ("discount", "additional discount"),
    "net_od": ("net od", "net own damage", "own damage net"),
    "ref": ("ref", "refund"),
    "total_od": ("total od", "total own damage", "own damage total"),
    "net_premium": ("net premium", "premium net", "basic premium"),
    "total_premium": ("total premium", "premium amount", "premium"),
    "cashback_percentage": ("cashback percentage", "cashback %", "cb %"),
    "cashback_amount": ("cashback amount", "cashback", "cb amount"),
    "customer_paid": ("customer paid", "amount paid", "paid amount"),
    "customer_cheque_no": ("customer cheque no", "cheque no", "cheque number"),
    "our_cheque_no": ("our cheque no", "our cheque"),
    "executive": ("executive", "agent", "sales rep"),
    "caller_name": ("caller name", "customer name", "insured name"),
    "mobile": ("mobile", "phone", "contact"),
    "rollover": ("rollover", "roll over"),
    "remark": ("remark", "remarks", "notes"),
    "brokerage": ("brokerage", "brokerage amount"),
    "cashback": ("cashback total",),
}

NUMERIC_FIELDS = frozenset({
    "idv", "ncb", "discount", "net_od", "total_od", "net_premium", "total_premium",
    "cashback_percentage", "cashback_amount", "customer_paid", "brokerage", "cashback",
})
DATE_FIELDS = frozenset({"issue_date", "expiry_date"})

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_AMOUNT = r"(?:₹|Rs\.?|INR)?\s*([\d,]+(?:\.\d+)?)"
_REG_NO = r"([A-Z]{2}\s?\d{1,2}\s?[A-Z]{1,3}\s?\d{4})"
_DATE = r"(\d{1,2}[/\-]\d{1,2}[/\-]\d{4}|\d{4}[/\-]\d{1,2}[/\-]\d{1,2})"

INSURER_PATTERNS: dict[str, dict[str, re.Pattern[str]]] = {
    "TATA_AIG": {
        "policy_number": re.compile(r"Policy\s*No\.?[:\s]*([A-Z0-9][A-Z0-9/\-]+)", re.I),
        "vehicle_number": re.compile(r"Vehicle\s*No\.?[:\s]*" + _REG_NO, re.I),
        "total_premium": re.compile(r"Total\s*Premium[:\s]*" + _AMOUNT, re.I),
    },
    "DIGIT": {
        "policy_number": re.compile(r"Policy\s*Number[:\s]*([A-Z0-9][A-Z0-9/\-]+)", re.I),
        "vehicle_number": re.compile(r"Registration\s*No\.?[:\s]*" + _REG_NO, re.I),
        "total_premium": re.compile(r"Premium\s*Amount[:\s]*" + _AMOUNT, re.I),
    },
}

# Order matters: first match per field wins
GENERIC_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (
        "policy_number",
        re.compile(
            r"Policy\s*(?:No\.?|Number|#)?\s*[:\-]?\s*((?=[A-Z0-9/\-]*\d)[A-Z0-9][A-Z0-9/\-]{3,})",
            re.I,
        ),
    ),
    (
        "vehicle_number",
        re.compile(r"(?:Vehicle|Registration|Reg)\.?\s*(?:No|Number)\.?[:\s]*" + _REG_NO, re.I),
    ),
    ("vehicle_number", re.compile(r"\b([A-Z]{2}\d{2}[A-Z]{1,2}\d{4})\b")),
    ("issue_date", re.compile(r"(?:Issue|Start|Inception)\s*Date[:\s]*" + _DATE, re.I)),
    ("expiry_date", re.compile(r"(?:Expiry|End)\s*Date[:\s]*" + _DATE, re.I)),
    ("idv", re.compile(r"\bIDV[:\s]*" + _AMOUNT, re.I)),
    ("ncb", re.compile(r"\bNCB[:\s]*(\d+(?:\.\d+)?)\s*%", re.I)),
    ("total_premium", re.compile(r"(?:Total\s*)?Premium[:\s]*" + _AMOUNT, re.I)),
]


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------

def parse_number(raw: Any) -> float | None:
    """Keep only digits and '.' then parse; ``None`` when nothing numeric remains."""
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    cleaned = re.sub(r"[^\d.]", "", str(raw)).lstrip(".")
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


_DAY_FIRST_RE = re.compile(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})")
_YEAR_FIRST_RE = re.compile(r"(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})")


def parse_date(raw: Any) -> str | None:
    """Normalize a date to ISO 8601.

    Accepts ``DD/MM/YYYY`` and ``DD-MM-YYYY`` (day first, Indian format) and
    ``YYYY-MM-DD`` / ``YYYY/MM/DD``.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()
    text = str(raw).strip()
    m = _YEAR_FIRST_RE.search(text)
    if m:
        year, month, day = m.groups()
    else:
        m = _DAY_FIRST_RE.search(text)
        if not m:
            return None
        day, month, year = m.groups()
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def _coerce(field: str, raw: Any) -> Any:
    if field in NUMERIC_FIELDS:
        return parse_number(raw)
    if field in DATE_FIELDS:
        return parse_date(raw)
    text = str(raw).strip() if raw is not None else ""
    return text or None


# ---------------------------------------------------------------------------
# Block helpers
# ---------------------------------------------------------------------------

def _is_entity(block: dict[str, Any], entity: str) -> bool:
    return entity in (block.get("EntityTypes") or []) or block.get("EntityType") == entity


def _block_text(block: dict[str, Any], block_map: dict[str, dict[str, Any]]) -> str:
    """A block's own ``Text``, else its CHILD WORD blocks joined with spaces."""
    if block.get("Text"):
        return block["Text"]
    words = []
    for rel in block.get("Relationships", []):
        if rel.get("Type") != "CHILD":
            continue
        for child_id in rel.get("Ids", []):
            child = block_map.get(child_id, {})
            if child.get("BlockType") == "WORD" and child.get("Text"):
                words.append(child["Text"])
    return " ".join(words)


def build_key_value_map(blocks: list[dict[str, Any]]) -> dict[str, str]:
    """Resolve FORMS key/value sets into ``{lower-case label: value text}``."""
    block_map = {b["Id"]: b for b in blocks if "Id" in b}
    pairs: dict[str, str] = {}

    for block in blocks:
        if block.get("BlockType") != "KEY_VALUE_SET" or not _is_entity(block, "KEY"):
            continue
        label = _block_text(block, block_map).strip().rstrip(":").strip().lower()
        if not label:
            continue

        value_parts = []
        for rel in block.get("Relationships", []):
            if rel.get("Type") != "VALUE":
                continue
            for value_id in rel.get("Ids", []):
                value_block = block_map.get(value_id)
                if value_block:
                    value_parts.append(_block_text(value_block, block_map))
        value = " ".join(p for p in value_parts if p).strip()
        if value and label not in pairs:
            pairs[label] = value

    return pairs


def lines_text(blocks: list[dict[str, Any]]) -> str:
    return " ".join(b["Text"] for b in blocks if b.get("BlockType") == "LINE" and b.get("Text"))


def ocr_confidence(blocks: list[dict[str, Any]]) -> float:
    """Mean LINE confidence scaled to 0..1."""
    scores = [b.get("Confidence", 0) or 0 for b in blocks if b.get("BlockType") == "LINE"]
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores) / 100, 2)


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------

def compute_confidence(
    fields_found: int,
    *,
    base: float | None = None,
    step: float | None = None,
    cap: float | None = None,
) -> float:
    base = settings.confidence_base if base is None else base
    step = settings.confidence_step if step is None else step
    cap = settings.confidence_cap if cap is None else cap
    return min(cap, round(base + step * fields_found, 4))


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def _apply_patterns(
    text: str, data: dict[str, Any], patterns: list[tuple[str, re.Pattern[str]]]
) -> None:
    for field, pattern in patterns:
        if data.get(field) not in (None, ""):
            continue
        m = pattern.search(text)
        if not m:
            continue
        raw = m.group(1)
        if field == "vehicle_number":
            raw = re.sub(r"\s+", "", raw).upper()
        value = _coerce(field, raw)
        if value is not None:
            data[field] = value


def extract_policy_data(blocks: list[dict[str, Any]], insurer: str | None = None) -> dict[str, Any]:
    """Map Textract blocks to a policy dict with ``source``, ``insurer`` and ``confidence_score``."""
    blocks = blocks or []
    kv = build_key_value_map(blocks)
    data: dict[str, Any] = {}

    for field, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if alias in kv:
                value = _coerce(field, kv[alias])
                if value is not None:
                    data[field] = value
                    break

    text = lines_text(blocks)
    if insurer in INSURER_PATTERNS:
        _apply_patterns(text, data, list(INSURER_PATTERNS[insurer].items()))
    _apply_patterns(text, data, GENERIC_PATTERNS)

    if insurer:
        data["insurer"] = insurer
    fields_found = sum(1 for v in data.values() if v not in (None, ""))
    confidence = compute_confidence(fields_found)
    logger.info(
        "Extracted %d fields (kv_pairs=%d, insurer=%s, confidence=%.2f)",
        fields_found, len(kv), insurer, confidence,
    )

    return {
        **data,
        "insurer": data.get("insurer"),
        "source": SOURCE_PDF_UPLOAD,
        "confidence_score": confidence,
    }
