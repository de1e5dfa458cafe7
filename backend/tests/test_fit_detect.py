import json

from fitcheck.services.fit_detect import PayloadKind, decode_payload, detect_payload
from fitcheck.services.fit_migrate import migrate_v1_to_v1_1

from reports import SCENARIO_A_MARKDOWN, v1_1_report, v1_report


def test_detect_v1_1():
    detected = detect_payload(v1_1_report())
    assert detected.kind == PayloadKind.V1_1
    assert detected.report.overall.score == 68


def test_detect_v1_1_from_string():
    detected = detect_payload(json.dumps(v1_1_report()))
    assert detected.kind == PayloadKind.V1_1


def test_detect_v1():
    assert detect_payload(v1_report()).kind == PayloadKind.V1


def test_version_tag_decides_schema():
    # A v1.1-shaped body tagged v1 must validate as v1 (deep dives need no analysis)
    report = v1_1_report(version="v1")
    assert detect_payload(report).kind == PayloadKind.V1


def test_boolean_score_is_not_a_number():
    report = v1_1_report()
    report["axes"][0]["score"] = True
    assert detect_payload(report).kind == PayloadKind.OPAQUE_TEXT


def test_numeric_string_score_is_not_a_number():
    report = v1_1_report()
    report["overall"]["score"] = "68"
    assert detect_payload(report).kind == PayloadKind.OPAQUE_TEXT


def test_detect_markdown():
    detected = detect_payload({"applicant_recruitment": SCENARIO_A_MARKDOWN})
    assert detected.kind == PayloadKind.MARKDOWN_EMBEDDED
    assert detected.markdown == SCENARIO_A_MARKDOWN


def test_blank_markdown_is_opaque():
    assert detect_payload({"applicant_recruitment": "   "}).kind == PayloadKind.OPAQUE_TEXT


def test_detect_opaque_text():
    detected = detect_payload("총점 70점")
    assert detected.kind == PayloadKind.OPAQUE_TEXT
    assert detected.data == "총점 70점"
    assert detected.report is None
    assert detected.markdown is None


def test_detect_opaque_object_keeps_decoded_data():
    detected = detect_payload({"note": "한글"})
    assert detected.kind == PayloadKind.OPAQUE_TEXT
    assert detected.data == {"note": "한글"}


def test_decode_payload():
    assert decode_payload('{"a": 1}') == {"a": 1}
    assert decode_payload("{broken") == "{broken"
    assert decode_payload(b"[1]") == [1]
    assert decode_payload("") == ""
    assert decode_payload(None) is None


# ============================================================================
# Migration
# ============================================================================

def test_migrate_deep_dives():
    report = migrate_v1_to_v1_1(v1_report())

    assert report.version == "v1.1"
    assert report.deep_dives[0].overview == "렌더링 최적화 경험이 있음"
    assert report.deep_dives[0].detail_md == ""
    assert report.deep_dives[0].next_steps == []
    assert report.deep_dives[1].overview == ""


def test_migrate_recommendations_default_priority():
    data = v1_report(recommendations=[
        {"action": "테스트 추가"},
        "bad entry",
        {"priority": "P1", "action": "리딩 경험 서술", "impact": 5},
    ])
    report = migrate_v1_to_v1_1(data)

    assert [(r.priority, r.action) for r in report.recommendations] == [
        ("P3", "테스트 추가"),
        ("P3", ""),
        ("P1", "리딩 경험 서술"),
    ]
    assert report.recommendations[2].impact is None


def test_migrate_drops_mistyped_optional_fields():
    data = v1_report(summary_short=42, locale="ko", meta="x", confidence="high", job={"title": "FE"})
    report = migrate_v1_to_v1_1(data)

    assert report.summary_short is None
    assert report.locale == "ko"
    assert report.meta is None
    assert report.confidence is None
    assert report.job == {"title": "FE"}


def test_migrate_requires_overall_score():
    data = v1_report()
    data["overall"]["score"] = None
    assert migrate_v1_to_v1_1(data) is None

    data.pop("overall")
    assert migrate_v1_to_v1_1(data) is None


def test_migrate_keeps_overall_lists():
    data = v1_report()
    data["overall"]["strengths"] = ["React", 3, None]
    report = migrate_v1_to_v1_1(data)
    assert report.overall.strengths == ["React"]
    assert report.overall.gaps == ["테스트"]
