import httpx

from fitcheck.models.fit_result import FitResult
from fitcheck.services.demo_reports import EXAMPLE_REVIEW

from conftest import PDF_BYTES, auth_headers
from reports import DEEP_DIVE_TITLES, SCENARIO_A_MARKDOWN, v1_1_report

JOB_URL = "https://careers.example.com/jobs/42"


def upload_files(name="cv.pdf", content=PDF_BYTES, mime="application/pdf"):
    return {"resume": (name, content, mime)}


# ============================================================================
# Service endpoints
# ============================================================================

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


# ============================================================================
# Auth
# ============================================================================

def test_results_require_auth(client):
    assert client.get("/api/fit").status_code == 401
    assert client.post("/api/fit/analyze", data={"job_url": JOB_URL}).status_code == 401
    assert client.get("/api/resume").status_code == 401


def test_invalid_token_rejected(client):
    response = client.get("/api/fit", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_session_cookie_accepted(client):
    token = auth_headers()["Authorization"].split(" ", 1)[1]
    client.cookies.set("token", token)
    response = client.get("/api/fit")
    assert response.status_code == 200
    assert response.json() == []


# ============================================================================
# Analyze
# ============================================================================

def test_analyze_with_upload(client, fake_engine):
    fake_engine.responses["oneclick"] = httpx.Response(200, json=v1_1_report())

    response = client.post(
        "/api/fit/analyze",
        data={"job_url": JOB_URL},
        files=upload_files(),
        headers=auth_headers(),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["demo"] is False

    detail = client.get(f"/api/fit/{body['result_id']}", headers=auth_headers()).json()
    assert detail["item"]["score"] == 68
    assert detail["item"]["resume_file_id"] is None
    assert detail["view"]["source"] == "v1.1"
    assert [d["title"] for d in detail["view"]["deep_dives"]] == DEEP_DIVE_TITLES


def test_analyze_uses_stored_resume(client, fake_engine):
    fake_engine.responses["oneclick"] = httpx.Response(200, text="총점 70점")
    uploaded = client.post("/api/resume", files=upload_files(), headers=auth_headers()).json()

    response = client.post("/api/fit/analyze", data={"job_url": JOB_URL}, headers=auth_headers())
    assert response.status_code == 200

    detail = client.get(f"/api/fit/{response.json()['result_id']}", headers=auth_headers()).json()
    assert detail["item"]["resume_file_id"] == uploaded["latest"]["id"]
    assert PDF_BYTES in fake_engine.calls[0][1].content


def test_result_keeps_resume_reference_after_resume_delete(client, fake_engine):
    fake_engine.responses["oneclick"] = httpx.Response(200, text="총점 70점")
    uploaded = client.post("/api/resume", files=upload_files(), headers=auth_headers()).json()
    resume_id = uploaded["latest"]["id"]

    response = client.post("/api/fit/analyze", data={"job_url": JOB_URL}, headers=auth_headers())
    result_id = response.json()["result_id"]
    assert client.delete("/api/resume", headers=auth_headers()).json() == {"ok": True}

    detail = client.get(f"/api/fit/{result_id}", headers=auth_headers()).json()
    assert detail["item"]["resume_file_id"] == resume_id
    assert detail["item"]["score"] == 70
    assert not FitResult.__table__.c.resume_file_id.foreign_keys


def test_analyze_without_resume(client, fake_engine):
    response = client.post("/api/fit/analyze", data={"job_url": JOB_URL}, headers=auth_headers())
    assert response.status_code == 400
    assert response.json()["detail"] == {"error": "invalid_request", "message": "resume required"}
    assert fake_engine.calls == []


def test_analyze_empty_upload_does_not_use_stored_resume(client, fake_engine):
    fake_engine.responses["oneclick"] = httpx.Response(200, text="총점 70점")
    client.post("/api/resume", files=upload_files(), headers=auth_headers())

    response = client.post(
        "/api/fit/analyze",
        data={"job_url": JOB_URL},
        files=upload_files(content=b""),
        headers=auth_headers(),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == {"error": "invalid_request", "message": "resume required"}
    assert fake_engine.calls == []
    assert client.get("/api/fit", headers=auth_headers()).json() == []


def test_analyze_without_job_url(client, fake_engine):
    response = client.post("/api/fit/analyze", files=upload_files(), headers=auth_headers())
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "jobUrl required"
    assert fake_engine.calls == []


def test_analyze_rejects_non_pdf(client, fake_engine):
    response = client.post(
        "/api/fit/analyze",
        data={"job_url": JOB_URL},
        files=upload_files(name="cv.txt", content=b"plain text", mime="text/plain"),
        headers=auth_headers(),
    )
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "pdf only"


def test_analyze_upstream_failure(client, fake_engine):
    fake_engine.responses["oneclick"] = httpx.Response(502, text="bad gateway")

    response = client.post(
        "/api/fit/analyze",
        data={"job_url": JOB_URL},
        files=upload_files(),
        headers=auth_headers(),
    )
    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["stage"] == "oneclick"
    assert detail["upstream_status"] == 502
    assert client.get("/api/fit", headers=auth_headers()).json() == []


def test_analyze_demo(client, fake_engine):
    response = client.post(
        "/api/fit/analyze",
        data={"job_url": JOB_URL, "demo_type": "review"},
        headers=auth_headers(),
    )
    assert response.status_code == 200
    assert response.json()["demo"] is True
    assert fake_engine.calls == []

    detail = client.get(f"/api/fit/{response.json()['result_id']}", headers=auth_headers()).json()
    assert detail["item"]["raw"] == EXAMPLE_REVIEW
    assert detail["view"]["rawText"] == EXAMPLE_REVIEW
    assert detail["view"]["score"] == 72
    assert len(detail["view"]["dimensions"]) == 5


def test_analyze_unknown_demo(client):
    response = client.post(
        "/api/fit/analyze",
        data={"job_url": JOB_URL, "demo_type": "bogus"},
        headers=auth_headers(),
    )
    assert response.status_code == 400


# ============================================================================
# Results
# ============================================================================

def test_list_results_newest_first(client):
    for demo_type in ("review", "comparison"):
        client.post(
            "/api/fit/analyze",
            data={"job_url": JOB_URL, "demo_type": demo_type},
            headers=auth_headers(),
        )

    response = client.get("/api/fit", headers=auth_headers())
    assert response.status_code == 200
    assert response.headers["Cache-Control"].startswith("no-cache")
    rows = response.json()
    assert [row["score"] for row in rows] == [68, 72]
    assert "raw" not in rows[0]


def test_result_is_private(client):
    created = client.post(
        "/api/fit/analyze",
        data={"job_url": JOB_URL, "demo_type": "review"},
        headers=auth_headers("user-1"),
    ).json()

    response = client.get(f"/api/fit/{created['result_id']}", headers=auth_headers("user-2"))
    assert response.status_code == 404
    assert client.get("/api/fit", headers=auth_headers("user-2")).json() == []


def test_unknown_result(client):
    response = client.get("/api/fit/does-not-exist", headers=auth_headers())
    assert response.status_code == 404


# ============================================================================
# Normalize preview
# ============================================================================

def test_normalize_markdown_payload(client):
    response = client.post("/api/fit/normalize", json={"applicant_recruitment": SCENARIO_A_MARKDOWN})
    assert response.status_code == 200
    view = response.json()
    assert view["source"] == "markdown"
    assert view["score"] == 64.5
    assert view["dimensions"][0] == {"name": "오너십", "score": 50.0}


def test_normalize_text_payload(client):
    response = client.post("/api/fit/normalize", json="총점 80점")
    assert response.status_code == 200
    assert response.json()["score"] == 80


def test_normalize_garbage_payload(client):
    response = client.post("/api/fit/normalize", json=[1, {"a": None}])
    assert response.status_code == 200
    assert response.json()["source"] == "empty"


# ============================================================================
# Resume files
# ============================================================================

def test_resume_lifecycle(client):
    assert client.get("/api/resume", headers=auth_headers()).json() == {"latest": None}

    uploaded = client.post("/api/resume", files=upload_files(), headers=auth_headers())
    assert uploaded.status_code == 200
    assert uploaded.json()["latest"]["original_name"] == "cv.pdf"
    assert uploaded.json()["latest"]["size"] == len(PDF_BYTES)

    latest = client.get("/api/resume", headers=auth_headers()).json()["latest"]
    assert latest["id"] == uploaded.json()["latest"]["id"]

    assert client.delete("/api/resume", headers=auth_headers()).json() == {"ok": True}
    assert client.get("/api/resume", headers=auth_headers()).json() == {"latest": None}


def test_resume_upload_rejects_non_pdf(client):
    response = client.post(
        "/api/resume",
        files=upload_files(name="cv.docx", content=b"PK", mime="application/msword"),
        headers=auth_headers(),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "pdf only"
