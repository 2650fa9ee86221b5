"""Shared fixtures: isolated settings, a temp CV, and a fake Gemini endpoint."""
import json
import os
import tempfile

# Must be set before autoapply is imported; settings are read at import time.
_TMP = tempfile.mkdtemp(prefix="autoapply-tests-")
os.environ["AUTOAPPLY_GEMINI_API_KEY"] = "test-key"
os.environ["AUTOAPPLY_RATE_LIMIT_ENABLED"] = "false"
os.environ["AUTOAPPLY_CACHE_FILE"] = os.path.join(_TMP, "gemini_cache.json")
os.environ["AUTOAPPLY_CV_DIR"] = os.path.join(_TMP, "cv")

import httpx
import pytest

from autoapply.config import settings
from autoapply.rate_limit import limiter
from autoapply.services.ai_service import AIService
from autoapply.services.cache_service import CacheService


CV_TEXT = """Jane Doe
Software Engineer

Skills: Python, FastAPI, PostgreSQL, Docker
Experience: 3 years building backend services.
"""

JOB_TEXT = """Backend Engineer at Acme Corp.
We need Python, FastAPI and Kubernetes experience.
Send your CV to careers@acme.example.com
"""


@pytest.fixture(autouse=True)
def _no_rate_limits():
    limiter.enabled = False
    yield


@pytest.fixture
def cache(tmp_path):
    return CacheService(str(tmp_path / "cache.json"), enabled=True)


@pytest.fixture
def cv_dir(tmp_path, monkeypatch):
    directory = tmp_path / "cv"
    directory.mkdir()
    (directory / "cv.txt").write_text(CV_TEXT, encoding="utf-8")
    monkeypatch.setattr(settings.cv, "cv_dir", str(directory))
    monkeypatch.setattr(settings.cv, "cv_filename", "cv.pdf")
    return directory


@pytest.fixture
def applicant(monkeypatch):
    monkeypatch.setattr(settings.applicant, "applicant_name", "Jane Doe")
    monkeypatch.setattr(settings.applicant, "applicant_phone", "0771234567")
    monkeypatch.setattr(settings.applicant, "applicant_website", "https://janedoe.dev")
    monkeypatch.setattr(settings.applicant, "applicant_email", "jane@janedoe.dev")


def gemini_reply(text: str) -> httpx.Response:
    return httpx.Response(
        200, json={"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}
    )


def gemini_error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


class FakeGemini:
    """
    Records generateContent requests and answers them from a list of
    responses (consumed in order) or from a handler function.
    """

    def __init__(self):
        self.requests = []
        self.responses = []
        self.handler = None

    def prompt(self, index: int = -1) -> str:
        body = json.loads(self.requests[index].content)
        return body["contents"][0]["parts"][0]["text"]

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request to {request.url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def service(gemini, cache):
    svc = AIService(cache=cache, transport=httpx.MockTransport(gemini))
    svc.base_delay = 0
    return svc
