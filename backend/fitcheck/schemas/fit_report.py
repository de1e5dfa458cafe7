"""
Structured fit report schemas returned by the analysis engine.

Two versions exist on the wire, told apart by the `version` tag:
- "v1.1" (current): deep dives carry `overview` / `detail_md` / `next_steps`
- "v1"   (prior):   deep dives carry a single `analysis` text
"""
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

SCHEMA_V1 = "v1"
SCHEMA_V1_1 = "v1.1"
EXPECTED_AXIS_COUNT = 5
DEFAULT_PRIORITY = "P3"

# Booleans and numeric strings are not scores
Number = Union[StrictInt, StrictFloat]


class Axis(BaseModel):
    id: StrictStr
    name: StrictStr
    score: Number


class DeepDive(BaseModel):
    id: StrictStr
    title: StrictStr
    score: Number
    overview: str = ""
    detail_md: str = ""
    next_steps: List[str] = Field(default_factory=list)


class DeepDiveV1(BaseModel):
    id: StrictStr
    title: StrictStr
    score: Number
    analysis: Optional[str] = None


class Recommendation(BaseModel):
    priority: str = DEFAULT_PRIORITY
    action: str = ""
    impact: Optional[str] = None


class Overall(BaseModel):
    score: Number
    summary: Optional[str] = None
    strengths: List[str] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)


class FitReportV11(BaseModel):
    """Current structured report (v1.1)."""
    version: Literal["v1.1"]
    axes: List[Axis] = Field(min_length=EXPECTED_AXIS_COUNT, max_length=EXPECTED_AXIS_COUNT)
    deep_dives: List[DeepDive]
    overall: Overall
    recommendations: List[Recommendation] = Field(default_factory=list)

    summary_short: Optional[str] = None
    summary_long: Optional[str] = None
    locale: Optional[str] = None
    job_family: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    job: Optional[Dict[str, Any]] = None
    resume: Optional[Dict[str, Any]] = None
    confidence: Optional[Number] = None


class FitReportV1(BaseModel):
    """
    Prior structured report (v1). Only the shape used for detection is
    declared here; `overall` and the optional fields are checked by the
    migrator so that malformed extras never reject the whole report.
    """
    version: Literal["v1"]
    axes: List[Axis] = Field(min_length=EXPECTED_AXIS_COUNT, max_length=EXPECTED_AXIS_COUNT)
    deep_dives: List[DeepDiveV1]
