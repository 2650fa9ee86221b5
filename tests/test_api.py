"""HTTP API tests with the AI, OCR and SMTP layers stubbed out."""
import httpx
import pytest
from fastapi.testclient import TestClient

from autoapply.config import settings
from autoapply.main import app
from autoapply.rate_limit import limiter
from autoapply.routers import analyze as analyze_router
from autoapply.schemas import JobAnalysis
from autoapply.services.ai_service import ai_service, AIServiceError
from autoapply.services.email_service import email_service, EmailServiceError
from autoapply.services.ocr_service import OCRServiceError

from .conftest import JOB_TEXT

ANALYSIS = JobAnalysis(
    compatibility=81,
    matching_skills=["Python", "FastAPI"],
    missing_skills=["Kubernetes"],
    eligibility="Eligible",
)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_ai(monkeypatch):
    calls = []

    async def analyze_job_vs_cv(job_text):
        calls.append(("analysis", job_text))
        return ANALYSIS

    async def extract_company_email(job_text):
        calls.append(("email", job_text))
        return "careers@acme.example.com"

    async def extract_job_title(job_text):
        calls.append(("title", job_text))
        return "Backend Engineer"

    async def generate_application_email(job_text):
        calls.append(("draft", job_text))
        return "Dear Hiring Manager,\n\nBest regards,"

    monkeypatch.setattr(ai_service, "analyze_job_vs_cv", analyze_job_vs_cv)
    monkeypatch.setattr(ai_service, "extract_company_email", extract_company_email)
    monkeypatch.setattr(ai_service, "extract_job_title", extract_job_title)
    monkeypatch.setattr(ai_service, "generate_application_email", generate_application_email)
    return calls


@pytest.fixture
def fake_ocr(monkeypatch):
    calls = []

    async def extract_text_from_image(data, content_type=None):
        calls.append((data, content_type))
        return JOB_TEXT

    monkeypatch.setattr(analyze_router, "extract_text_from_image", extract_text_from_image)
    return calls


@pytest.fixture
def fake_send(monkeypatch):
    calls = []

    async def send_email(to_email, subject, body):
        calls.append((to_email, subject, body))
        return "<id@example.com>"

    monkeypatch.setattr(email_service, "send_email", send_email)
    return calls


# --- System ---

def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["message"] == "AutoApply AI Backend Running"


def test_chat_page_renders(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "/api/analyze" in response.text


def test_ai_status(client, monkeypatch):
    async def list_models():
        return ["gemini-2.5-flash"]

    monkeypatch.setattr(ai_service, "list_models", list_models)

    data = client.get("/api/ai/status").json()

    assert data["available"] is True
    assert data["models"] == ["gemini-2.5-flash"]
    assert data["visionModel"] == ai_service.vision_model
    assert "cachedItems" in data


def test_prompts_listing(client):
    data = client.get("/api/ai/prompts").json()
    assert "job_analysis" in data["available_names"]
    assert "{job_text}" in data["prompts"]["job_title"]["template"]


def test_single_prompt(client):
    from autoapply.services.ai_prompts import OCR_PROMPT

    data = client.get("/api/ai/prompts/ocr").json()

    assert data == {"name": "ocr", "template": OCR_PROMPT, "character_count": len(OCR_PROMPT)}


def test_unknown_prompt_is_404(client):
    response = client.get("/api/ai/prompts/nope")
    assert response.status_code == 404
    assert "nope" in response.json()["error"]


# --- Analyze ---

def test_analyze_text(client, fake_ai, fake_ocr):
    response = client.post("/api/analyze", data={"jobText": JOB_TEXT})

    assert response.status_code == 200
    data = response.json()
    assert data == {
        "jobText": JOB_TEXT.strip(),
        "analysis": {
            "compatibility": 81,
            "matchingSkills": ["Python", "FastAPI"],
            "missingSkills": ["Kubernetes"],
            "eligibility": "Eligible",
        },
        "email": "Dear Hiring Manager,\n\nBest regards,",
        "companyEmail": "careers@acme.example.com",
        "jobTitle": "Backend Engineer",
        "success": True,
    }
    assert fake_ocr == []
    assert [name for name, _ in fake_ai][0] == "analysis"
    assert [name for name, _ in fake_ai][-1] == "draft"


def test_analyze_image_runs_ocr(client, fake_ai, fake_ocr):
    response = client.post(
        "/api/analyze",
        files={"image": ("post.png", b"\x89PNG fake", "image/png")},
    )

    assert response.status_code == 200
    assert response.json()["jobText"] == JOB_TEXT.strip()
    assert fake_ocr == [(b"\x89PNG fake", "image/png")]


def test_text_wins_over_image(client, fake_ai, fake_ocr):
    response = client.post(
        "/api/analyze",
        data={"jobText": "Typed job post"},
        files={"image": ("post.png", b"\x89PNG fake", "image/png")},
    )

    assert response.status_code == 200
    assert response.json()["jobText"] == "Typed job post"
    assert fake_ocr == []


def test_analyze_without_input_is_400(client, fake_ai):
    response = client.post("/api/analyze", data={"jobText": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Please provide a job description or upload an image"}
    assert fake_ai == []


def test_image_with_no_text_is_400(client, fake_ai, monkeypatch):
    async def blank_ocr(data, content_type=None):
        return ""

    monkeypatch.setattr(analyze_router, "extract_text_from_image", blank_ocr)

    response = client.post("/api/analyze", files={"image": ("post.png", b"\x89PNG", "image/png")})

    assert response.status_code == 400


def test_oversized_image_is_400(client, fake_ai, fake_ocr, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_mb", 0)

    response = client.post("/api/analyze", files={"image": ("post.png", b"\x89PNG", "image/png")})

    assert response.status_code == 400
    assert "too large" in response.json()["error"]
    assert fake_ocr == []


def test_oversized_image_is_400_even_with_text(client, fake_ai, fake_ocr, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_mb", 0)

    response = client.post(
        "/api/analyze",
        data={"jobText": "Typed job post"},
        files={"image": ("post.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 400
    assert "too large" in response.json()["error"]
    assert fake_ai == []


def test_unreadable_cv_is_reported_as_processing_failure(client, monkeypatch, cv_dir, cache, gemini):
    (cv_dir / "cv.pdf").write_bytes(b"%PDF-1.4 this is not really a pdf")
    monkeypatch.setattr(ai_service, "cache", cache)
    monkeypatch.setattr(ai_service, "_transport", httpx.MockTransport(gemini))

    response = client.post("/api/analyze", data={"jobText": JOB_TEXT})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to process job post"
    assert response.json()["details"] == "Failed to analyze job compatibility"
    assert gemini.requests == []


def test_analyze_rate_limit_is_429(client, fake_ai):
    limiter.reset()
    limiter.enabled = True
    try:
        statuses = [
            client.post("/api/analyze", data={"jobText": JOB_TEXT}).status_code
            for _ in range(6)
        ]
    finally:
        limiter.enabled = False
        limiter.reset()

    assert statuses[:5] == [200] * 5
    assert statuses[5] == 429


def test_analysis_failure_is_500(client, fake_ai, monkeypatch):
    async def failing(job_text):
        raise AIServiceError("Failed to analyze job compatibility")

    monkeypatch.setattr(ai_service, "analyze_job_vs_cv", failing)

    response = client.post("/api/analyze", data={"jobText": JOB_TEXT})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to process job post",
        "details": "Failed to analyze job compatibility",
    }


def test_ocr_failure_is_500(client, fake_ai, monkeypatch):
    async def failing(data, content_type=None):
        raise OCRServiceError("Failed to extract text from image.")

    monkeypatch.setattr(analyze_router, "extract_text_from_image", failing)

    response = client.post("/api/analyze", files={"image": ("post.jpg", b"\xff\xd8", "image/jpeg")})

    assert response.status_code == 500
    assert response.json()["details"] == "Failed to extract text from image."


# --- Send email ---

def test_send_email(client, fake_send):
    response = client.post("/api/send-email", json={
        "to": "careers@acme.example.com",
        "subject": "Application for Backend Engineer",
        "body": "Dear Hiring Manager,",
    })

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Email sent successfully!"}
    assert fake_send == [
        ("careers@acme.example.com", "Application for Backend Engineer", "Dear Hiring Manager,")
    ]


@pytest.mark.parametrize("payload", [
    {},
    {"to": "careers@acme.example.com", "subject": "Hi"},
    {"to": "careers@acme.example.com", "subject": " ", "body": "Body"},
])
def test_send_email_missing_fields(client, fake_send, payload):
    response = client.post("/api/send-email", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: to, subject, body"}
    assert fake_send == []


def test_send_email_invalid_recipient(client, fake_send):
    response = client.post("/api/send-email", json={
        "to": "not-an-address", "subject": "Hi", "body": "Body",
    })

    assert response.status_code == 400
    assert fake_send == []


def test_send_email_failure_is_500(client, monkeypatch):
    async def failing(to_email, subject, body):
        raise EmailServiceError("Failed to send email. Check your SMTP credentials.")

    monkeypatch.setattr(email_service, "send_email", failing)

    response = client.post("/api/send-email", json={
        "to": "careers@acme.example.com", "subject": "Hi", "body": "Body",
    })

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to send email",
        "details": "Failed to send email. Check your SMTP credentials.",
    }
