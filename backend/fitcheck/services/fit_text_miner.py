"""
Text-mining fallback parser for free-text / markdown fit reports.

Used when no structured schema matches. Every function here is best-effort:
missing sections yield empty results, never errors.
"""
import re
from typing import List, Optional, Union

from ..schemas.fit import Dimension, FitView

Number = Union[int, float]

# A score token; never starts inside a larger number ("64.5" is not "5")
_NUM = r"(?<![\d.])(\d{1,3}(?:\.\d+)?)"

# Label-to-score gap; bounded so scanning stays linear in line length
_GAP = r"[^\n]{0,60}?"

# Precedence order: total score phrase, overall score label, any N/100
TOTAL_SCORE_PATTERNS = (
    re.compile(rf"총\s*점\s*[:：]?\s*{_NUM}\s*점"),
    re.compile(rf"total\s*score\s*[:：]?\s*{_NUM}", re.IGNORECASE),
    re.compile(rf"overall\s*score[:：\s]+{_NUM}", re.IGNORECASE),
    re.compile(rf"{_NUM}\s*/\s*100(?!\d)"),
)

REVIEW_LABELS = (
    r"기술\s*역량|문제\s*해결|학습|성장|오너십|협업|소통"
    r"|technical\s+skills?|problem[\s-]*solving|learning|growth|ownership|collaboration|communication"
)
REVIEW_DIMENSION_RE = re.compile(
    rf"({REVIEW_LABELS}){_GAP}{_NUM}\s*(?:점|/\s*100)", re.IGNORECASE
)

COMPARISON_LABELS = r"직무.?기술|기술.?적합성|유사.?프로덕트|개인.?역량|커뮤니케이션|협업"
COMPARISON_FRACTION_RE = re.compile(
    rf"({COMPARISON_LABELS}){_GAP}{_NUM}\s*/\s*(\d{{1,3}})(?!\d)\s*점?"
)
COMPARISON_POINTS_RE = re.compile(rf"({COMPARISON_LABELS}){_GAP}{_NUM}\s*점")

REVIEW_STYLE_RE = re.compile(
    r"첨삭|가독성|문서|역량\s*점수|기술\s*역량|문제\s*해결|오너십|협업"
    r"|readability|competency\s+score|ownership|collaboration",
    re.IGNORECASE,
)

# Section headings; English headings must open a line
STRENGTHS_TITLE = r"강점|부각해야\s*할\s*점|^[ \t#*]*(?:strengths?|highlights?)\b"
GAPS_TITLE = r"아쉽|부족|개선\s*필요|^[ \t#*]*(?:gaps?|weakness(?:es)?|needs\s+improvement)\b"
RECOMMENDATIONS_TITLE = r"추천|액션|더\s*쌓아야|제안|^[ \t#*]*(?:recommendations?|next\s+actions?)\b"
COMPARISON_RECOMMENDATIONS_TITLE = RECOMMENDATIONS_TITLE + r"|스토리텔링"

BULLET_RE = re.compile(r"^[-*•]\s*")
PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
SENTENCE_END_RE = re.compile(r"(?<=[.!?…。])\s+")

TABLE_ROW_RE = re.compile(r"^\|[ \t]*([^|\n]+?)\s*\|\s*([\d.]+)\s*/\s*(\d+)\s*\|", re.MULTILINE)
TABLE_PRIORITY = ("직무 및 기술 적합성", "오너십", "협업 및 소통")
MAX_TABLE_SCORES = 5
SUMMARY_MAX_SENTENCES = 3
SUMMARY_MAX_CHARS = 300


def clamp_score(value: Number) -> Number:
    return max(0, min(100, value))


def _to_number(token: str) -> Number:
    value = float(token)
    return int(value) if value.is_integer() else value


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def extract_total_score(text: str) -> Optional[Number]:
    for pattern in TOTAL_SCORE_PATTERNS:
        m = pattern.search(text)
        if m:
            return clamp_score(_to_number(m.group(1)))
    return None


def split_paragraphs(text: str) -> List[str]:
    return [p.strip() for p in PARAGRAPH_BREAK_RE.split(_normalize_newlines(text)) if p.strip()]


def pick_summary(text: str) -> Optional[str]:
    """First paragraph, cut to three sentences when longer, else its first 300 chars."""
    if not isinstance(text, str):
        return None
    paragraphs = split_paragraphs(text)
    if not paragraphs:
        return None
    first = paragraphs[0]
    sentences = [s for s in SENTENCE_END_RE.split(first) if s.strip()]
    if len(sentences) > SUMMARY_MAX_SENTENCES:
        return " ".join(sentences[:SUMMARY_MAX_SENTENCES])
    return first[:SUMMARY_MAX_CHARS]


def extract_bullets(text: str, title_pattern: str) -> List[str]:
    """Lines after a heading up to the next blank line, bullet markers stripped."""
    m = re.search(
        rf"(?:{title_pattern})[\s\S]*?(?=\n\s*\n|\Z)",
        _normalize_newlines(text),
        re.IGNORECASE | re.MULTILINE,
    )
    if not m:
        return []
    items = []
    for line in m.group(0).split("\n")[1:]:
        item = BULLET_RE.sub("", line.strip()).strip()
        if item:
            items.append(item)
    return items


def extract_review_dimensions(text: str) -> List[Dimension]:
    # Repeated labels are all kept
    return [
        Dimension(
            name=re.sub(r"\s+", " ", m.group(1)),
            score=clamp_score(_to_number(m.group(2))),
        )
        for m in REVIEW_DIMENSION_RE.finditer(text)
    ]


def extract_comparison_dimensions(text: str) -> List[Dimension]:
    dims = []
    for m in COMPARISON_FRACTION_RE.finditer(text):
        total = max(1, int(m.group(3)))
        pct = _round_half_up(float(m.group(2)) / total * 100)
        dims.append(Dimension(name=re.sub(r"\s+", "", m.group(1)), score=clamp_score(pct)))
    if not dims:
        for m in COMPARISON_POINTS_RE.finditer(text):
            dims.append(Dimension(
                name=re.sub(r"\s+", "", m.group(1)),
                score=clamp_score(_to_number(m.group(2))),
            ))
    return dims


def extract_table_scores(markdown: str) -> List[Dimension]:
    """
    Read "| name | a/b |" table rows as percentages.
    Headline criteria come first; at most five rows are kept.
    """
    found = []
    for m in TABLE_ROW_RE.finditer(_normalize_newlines(markdown)):
        try:
            score = float(m.group(2))
            total = float(m.group(3))
        except ValueError:
            continue
        if total <= 0:
            continue
        found.append(Dimension(name=m.group(1).strip(), score=round(clamp_score(score / total * 100), 1)))

    prioritized = []
    for label in TABLE_PRIORITY:
        match = next((d for d in found if label in d.name), None)
        if match is not None and match not in prioritized:
            prioritized.append(match)
    rest = [d for d in found if all(p.name != d.name for p in prioritized)]
    return (prioritized + rest)[:MAX_TABLE_SCORES]


def is_review_report(text: str) -> bool:
    """Résumé-review reports mention readability/competency keywords; comparison is the default."""
    return bool(REVIEW_STYLE_RE.search(text))


def parse_resume_review(text: str) -> FitView:
    view = FitView(raw_text=text, source="text")
    view.score = extract_total_score(text)
    dims = extract_review_dimensions(text)
    if dims:
        view.dimensions = dims
    view.strengths = extract_bullets(text, STRENGTHS_TITLE)
    view.gaps = extract_bullets(text, GAPS_TITLE)
    view.recommendations = extract_bullets(text, RECOMMENDATIONS_TITLE)
    view.summary = pick_summary(text)
    return view


def parse_comparison_report(text: str) -> FitView:
    view = FitView(raw_text=text, source="text")
    view.score = extract_total_score(text)
    dims = extract_comparison_dimensions(text)
    if dims:
        view.dimensions = dims
    view.strengths = extract_bullets(text, STRENGTHS_TITLE)
    view.gaps = extract_bullets(text, GAPS_TITLE)
    view.recommendations = extract_bullets(text, COMPARISON_RECOMMENDATIONS_TITLE)
    view.summary = pick_summary(text)
    return view


def mine_report(text: str) -> FitView:
    """Pick the report style and run the matching mining routine."""
    if is_review_report(text):
        return parse_resume_review(text)
    return parse_comparison_report(text)
