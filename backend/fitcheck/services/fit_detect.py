"""
Schema detection for raw analysis-engine payloads.

Classifies a payload into one of a closed set of shapes without ever raising.
Ambiguous input always falls through to a weaker classification.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from ..schemas.fit_report import FitReportV1, FitReportV11, SCHEMA_V1, SCHEMA_V1_1

logger = logging.getLogger(__name__)

# Field agreed with the engine for long-form markdown reports
MARKDOWN_REPORT_FIELD = "applicant_recruitment"


class PayloadKind(str, Enum):
    V1 = "v1"
    V1_1 = "v1.1"
    MARKDOWN_EMBEDDED = "markdown"
    OPAQUE_TEXT = "text"


@dataclass
class DetectedPayload:
    kind: PayloadKind
    data: Any = None                        # decoded payload (dict for structured kinds)
    report: Optional[FitReportV11] = None   # set for V1_1
    markdown: Optional[str] = None          # set for MARKDOWN_EMBEDDED


def decode_payload(raw: Any) -> Any:
    """JSON-decode strings; anything undecodable is returned untouched."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        stripped = raw.strip()
        if not stripped:
            return raw
        try:
            return json.loads(stripped)
        except ValueError:
            return raw
    return raw


def is_v1_1(data: Any) -> Optional[FitReportV11]:
    if not isinstance(data, dict) or data.get("version") != SCHEMA_V1_1:
        return None
    try:
        return FitReportV11.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Payload tagged {SCHEMA_V1_1} failed validation: {e.error_count()} errors")
        return None


def is_v1(data: Any) -> bool:
    if not isinstance(data, dict) or data.get("version") != SCHEMA_V1:
        return False
    try:
        FitReportV1.model_validate(data)
        return True
    except ValidationError as e:
        logger.debug(f"Payload tagged {SCHEMA_V1} failed validation: {e.error_count()} errors")
        return False


def markdown_report(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    value = data.get(MARKDOWN_REPORT_FIELD)
    if isinstance(value, str) and value.strip():
        return value
    return None


def detect_payload(raw: Any) -> DetectedPayload:
    """Classify a raw payload (object or string) as v1.1, v1, markdown or opaque text."""
    data = decode_payload(raw)

    report = is_v1_1(data)
    if report is not None:
        return DetectedPayload(kind=PayloadKind.V1_1, data=data, report=report)

    if is_v1(data):
        return DetectedPayload(kind=PayloadKind.V1, data=data)

    markdown = markdown_report(data)
    if markdown is not None:
        return DetectedPayload(kind=PayloadKind.MARKDOWN_EMBEDDED, data=data, markdown=markdown)

    return DetectedPayload(kind=PayloadKind.OPAQUE_TEXT, data=data)
