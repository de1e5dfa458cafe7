"""
Result Normalizer - turns any analysis-engine output into one FitView.

Structured paths are tried first (v1.1, v1 migrated to v1.1, embedded
markdown, ad-hoc structured objects); everything else is text-mined.
`normalize` is total: unrecognized or malformed shapes degrade to a weaker
classification and, at worst, to an empty-but-valid FitView.
"""
import logging
from typing import Any, List, Optional

from ..schemas.fit import DeepDiveView, Dimension, FitView
from ..schemas.fit_report import FitReportV11
from .fit_detect import PayloadKind, detect_payload
from .fit_migrate import migrate_v1_to_v1_1
from .fit_text_miner import clamp_score, extract_table_scores, mine_report, pick_summary

logger = logging.getLogger(__name__)

ITEM_FIELDS = ("raw", "rawText", "score", "summary", "strengths", "gaps", "recommendations")
TEXT_KEYS = ("text", "rawText", "content", "report")


# ============================================================================
# Item helpers
# ============================================================================

def _as_item(item: Any) -> dict:
    """Accept a mapping, a FitResult-like row, None, or a bare payload."""
    if item is None:
        return {}
    if isinstance(item, dict):
        if "raw" in item:
            return item
        # A bare payload doubles as its own item
        return {**item, "raw": item}
    if hasattr(item, "raw"):
        return {field: getattr(item, field, None) for field in ITEM_FIELDS}
    return {"raw": item}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _score_or_none(value: Any) -> Optional[float]:
    return clamp_score(value) if _is_number(value) else None


def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [v for v in value if isinstance(v, str) and v.strip()]


def _first_list(*candidates: Any) -> List[str]:
    for candidate in candidates:
        strings = _string_list(candidate)
        if strings is not None:
            return strings
    return []


def _dimension_list(value: Any) -> Optional[List[Dimension]]:
    if not isinstance(value, list):
        return None
    dims = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        score = entry.get("score")
        if isinstance(name, str) and _is_number(score):
            dims.append(Dimension(name=name, score=clamp_score(score)))
    return dims


def longest_string(obj: Any) -> Optional[str]:
    """Longest string value found anywhere inside a nested object."""
    best = None
    stack = [obj]
    while stack:
        current = stack.pop()
        if isinstance(current, str):
            if best is None or len(current) > len(best):
                best = current
        elif isinstance(current, dict):
            stack.extend(current.values())
        elif isinstance(current, list):
            stack.extend(current)
    return best


def extract_text(item: dict, raw: Any) -> str:
    """Best available report text for an item, in order of preference."""
    if isinstance(raw, str):
        return raw
    if isinstance(item.get("rawText"), str):
        return item["rawText"]
    if isinstance(raw, (dict, list)):
        if isinstance(raw, dict):
            for key in TEXT_KEYS:
                value = raw.get(key)
                if isinstance(value, str) and value.strip():
                    return value
        longest = longest_string(raw)
        if longest:
            return longest
    if isinstance(item.get("summary"), str):
        return item["summary"]
    return ""


# ============================================================================
# Builders
# ============================================================================

def view_from_report(report: FitReportV11, item: dict, text: str, source: str) -> FitView:
    overall = report.overall
    summary = (
        _string_or_none(report.summary_short)
        or _string_or_none(overall.summary)
        or _string_or_none(report.summary_long)
        or _string_or_none(item.get("summary"))
        or pick_summary(text)
    )
    actions = [r.action for r in report.recommendations if r.action.strip()]
    return FitView(
        score=clamp_score(overall.score),
        summary=summary,
        dimensions=[Dimension(name=a.name, score=clamp_score(a.score)) for a in report.axes],
        strengths=overall.strengths or _first_list(item.get("strengths")),
        gaps=overall.gaps or _first_list(item.get("gaps")),
        recommendations=actions or _first_list(item.get("recommendations")),
        deep_dives=[
            DeepDiveView(
                id=d.id,
                title=d.title,
                score=clamp_score(d.score),
                overview=d.overview,
                detail_md=d.detail_md,
                next_steps=d.next_steps,
            )
            for d in report.deep_dives
        ],
        raw_text=text,
        source=source,
    )


def view_from_markdown(markdown: str) -> FitView:
    view = mine_report(markdown)
    table = extract_table_scores(markdown)
    if table:
        view.dimensions = table
    view.source = "markdown"
    return view


def has_structured_scores(data: Any) -> bool:
    return isinstance(data, dict) and (
        _is_number(data.get("score")) or isinstance(data.get("dimensions"), list)
    )


def view_from_structured(data: dict, item: dict, text: str) -> FitView:
    score = _score_or_none(data.get("score"))
    if score is None:
        score = _score_or_none(item.get("score"))
    return FitView(
        score=score,
        summary=(
            _string_or_none(data.get("summary"))
            or _string_or_none(item.get("summary"))
            or pick_summary(text)
        ),
        dimensions=_dimension_list(data.get("dimensions")),
        strengths=_first_list(data.get("strengths"), item.get("strengths")),
        gaps=_first_list(data.get("gaps"), item.get("gaps")),
        recommendations=_first_list(data.get("recommendations"), item.get("recommendations")),
        raw_text=text,
        source="structured",
    )


# ============================================================================
# Entry point
# ============================================================================

def normalize(item: Any) -> FitView:
    """
    Convert a raw analysis item into a FitView. Never raises.

    `item` is usually a FitResult row or a dict with a `raw` payload plus
    denormalized sibling fields (`score`, `summary`, ...).
    """
    try:
        return _normalize(_as_item(item))
    except Exception as e:
        logger.debug(f"Normalization degraded to empty view: {e}")
        return FitView(raw_text="", source="empty")


def _normalize(item: dict) -> FitView:
    raw = item.get("raw")
    detected = detect_payload(raw)
    data = detected.data
    text = extract_text(item, data if isinstance(data, (dict, list, str)) else raw)

    if detected.kind == PayloadKind.V1_1:
        return view_from_report(detected.report, item, text, source="v1.1")

    if detected.kind == PayloadKind.V1:
        report = migrate_v1_to_v1_1(detected.data)
        if report is not None:
            return view_from_report(report, item, text, source="v1")
        logger.debug("v1 migration failed - falling back to text mining")

    if detected.kind == PayloadKind.MARKDOWN_EMBEDDED:
        return view_from_markdown(detected.markdown)

    if has_structured_scores(data):
        return view_from_structured(data, item, text)

    if not text.strip():
        return FitView(
            score=_score_or_none(item.get("score")),
            summary=_string_or_none(item.get("summary")),
            raw_text="",
            source="empty",
        )

    return mine_report(text)
