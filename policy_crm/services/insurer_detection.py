"""Insurer detection for uploaded policy PDFs.

Order of precedence on upload:
  1. keyword match over the PDF text (pdfplumber)
  2. OpenAI classification, only when ``OPENAI_API_KEY`` is set
  3. the insurer the user picked in the upload form

The extraction Lambda uses :func:`insurer_from_object` instead, since it only
has the S3 object metadata and key to go on.
"""

from __future__ import annotations

import io
import json
import logging

import pdfplumber
from openai import AsyncOpenAI, OpenAIError
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from policy_crm.core.config import settings
from policy_crm.services.storage import metadata_value

logger = logging.getLogger(__name__)

KNOWN_INSURERS: tuple[str, ...] = ("TATA_AIG", "DIGIT", "RELIANCE_GENERAL")

# Checked in order; first hit wins
_TEXT_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("TATA_AIG", ("TATA AIG", "TATA-AIG", "TATAAIG")),
    ("DIGIT", ("GO DIGIT", "DIGIT INSURANCE", "GODIGIT")),
    ("RELIANCE_GENERAL", ("RELIANCE GENERAL", "RELIANCEGENERAL")),
]

_KEY_KEYWORDS: list[tuple[str, str]] = [
    ("tata", "TATA_AIG"),
    ("digit", "DIGIT"),
    ("reliance", "RELIANCE_GENERAL"),
]

DETECTION_PROMPT = """You classify Indian motor insurance policy documents by insurer.
Return ONLY valid JSON of the form {"insurer": "<value>"} where <value> is exactly one of:
TATA_AIG, DIGIT, RELIANCE_GENERAL, UNKNOWN.
Look for company names, headers, and insurer-specific policy terminology."""


def insurer_from_object(bucket: str, key: str, metadata: dict[str, str] | None = None) -> str:
    """Insurer for an S3 object: explicit metadata, else key/bucket keywords, else the default."""
    explicit = metadata_value(metadata, "insurer")
    if explicit:
        return explicit
    haystack = f"{bucket}/{key}".lower()
    for keyword, insurer in _KEY_KEYWORDS:
        if keyword in haystack:
            return insurer
    return settings.default_insurer


def extract_pdf_text(pdf_bytes: bytes) -> str:
    pages: list[str] = []
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        for page in pdf.pages:
            text = page.extract_text()
            if text:
                pages.append(text)
    return "\n".join(pages)


def detect_from_text(text: str) -> str | None:
    if not text:
        return None
    upper = text.upper()
    for insurer, keywords in _TEXT_KEYWORDS:
        if any(kw in upper for kw in keywords):
            return insurer
    return None


async def _detect_with_openai(text: str) -> str | None:
    client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.openai_timeout)
    try:
        response = await client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": DETECTION_PROMPT},
                {"role": "user", "content": text[:2000]},
            ],
            temperature=0.1,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or "{}"
        payload = json.loads(content)
    except (OpenAIError, json.JSONDecodeError) as exc:
        logger.warning("OpenAI insurer detection failed: %s", exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("OpenAI insurer detection returned non-object JSON: %r", payload)
        return None
    insurer = str(payload.get("insurer", "")).upper()
    return insurer if insurer in KNOWN_INSURERS else None


async def detect_insurer(pdf_bytes: bytes, selected: str) -> str:
    """Best guess at the insurer of an uploaded PDF, falling back to ``selected``."""
    try:
        text = extract_pdf_text(pdf_bytes)
    except (PDFSyntaxError, PdfminerException) as exc:
        logger.warning("Could not read PDF text for insurer detection: %s", exc)
        return selected

    detected = detect_from_text(text)
    if detected is None and settings.ai_enabled and text.strip():
        detected = await _detect_with_openai(text)

    if detected and detected != selected:
        logger.info("Detected insurer %s overrides selected %s", detected, selected)
    return detected or selected
