"""
Upgrade v1 structured fit reports to the current v1.1 shape.
"""
import logging
from typing import Any, Optional

from pydantic import ValidationError

from ..schemas.fit_report import FitReportV11, SCHEMA_V1_1, DEFAULT_PRIORITY

logger = logging.getLogger(__name__)

# Optional scalar fields copied through only when they type-check
_STRING_FIELDS = ("summary_short", "summary_long", "locale", "job_family")
_OBJECT_FIELDS = ("meta", "job", "resume")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _strings(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def migrate_deep_dive(entry: dict) -> dict:
    """analysis -> overview, synthesize detail_md, keep only string next_steps."""
    migrated = {
        "id": entry.get("id"),
        "title": entry.get("title"),
        "score": entry.get("score"),
    }
    overview = entry.get("overview")
    if isinstance(overview, str):
        migrated["overview"] = overview
    else:
        analysis = entry.get("analysis")
        migrated["overview"] = analysis if isinstance(analysis, str) else ""

    detail_md = entry.get("detail_md")
    migrated["detail_md"] = detail_md if isinstance(detail_md, str) else ""
    migrated["next_steps"] = _strings(entry.get("next_steps"))
    return migrated


def migrate_recommendation(entry: Any) -> dict:
    if not isinstance(entry, dict):
        entry = {}
    priority = entry.get("priority")
    action = entry.get("action")
    migrated = {
        "priority": priority if isinstance(priority, str) and priority else DEFAULT_PRIORITY,
        "action": action if isinstance(action, str) else "",
    }
    impact = entry.get("impact")
    if isinstance(impact, str):
        migrated["impact"] = impact
    return migrated


def migrate_overall(overall: Any) -> Optional[dict]:
    if not isinstance(overall, dict) or not _is_number(overall.get("score")):
        return None
    migrated = {"score": overall["score"]}
    if isinstance(overall.get("summary"), str):
        migrated["summary"] = overall["summary"]
    migrated["strengths"] = _strings(overall.get("strengths"))
    migrated["gaps"] = _strings(overall.get("gaps"))
    return migrated


def migrate_v1_to_v1_1(data: dict) -> Optional[FitReportV11]:
    """
    Reshape a validated v1 report into a v1.1 report.

    Returns None when the report has no numeric overall score; the caller
    must then fall back to opaque-text handling. Malformed optional fields
    are dropped, never raised on.
    """
    overall = migrate_overall(data.get("overall"))
    if overall is None:
        logger.debug("v1 report has no numeric overall.score - migration skipped")
        return None

    upgraded = {
        "version": SCHEMA_V1_1,
        "axes": data.get("axes"),
        "deep_dives": [
            migrate_deep_dive(d) for d in data.get("deep_dives", []) if isinstance(d, dict)
        ],
        "overall": overall,
        "recommendations": [
            migrate_recommendation(r) for r in data.get("recommendations", [])
        ] if isinstance(data.get("recommendations"), list) else [],
    }

    for field in _STRING_FIELDS:
        if isinstance(data.get(field), str):
            upgraded[field] = data[field]
    for field in _OBJECT_FIELDS:
        if isinstance(data.get(field), dict):
            upgraded[field] = data[field]
    if _is_number(data.get("confidence")):
        upgraded["confidence"] = data["confidence"]

    try:
        return FitReportV11.model_validate(upgraded)
    except ValidationError as e:
        logger.debug(f"Migrated v1 report failed v1.1 validation: {e.error_count()} errors")
        return None
