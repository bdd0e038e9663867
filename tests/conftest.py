"""
Pytest fixtures for Resume Insights.

LLM traffic goes to FakeLLMClient (patched over core.llm._client_instance),
storage is a fresh MemStorage per test, audit logging is disabled.
"""

from __future__ import annotations

import json
import threading
from types import SimpleNamespace

import pytest

from core import config, llm
from core.memory import MemStorage, reset_storage_for_test

RESUME = (
    "Jane Doe\n"
    "Senior Software Engineer\n"
    "Led migration of 40 services to AWS, cutting infra cost by 30%.\n"
    "Skills: Python, FastAPI, PostgreSQL, Docker"
)
JOB_DESCRIPTION = (
    "Backend Engineer. Requirements: Python, Kubernetes, distributed systems."
)

# prompt fragment -> canned reply; first match wins
CANNED = [
    ("Rate the given resume", json.dumps({"rating": 8, "explanation": "Clear and quantified."})),
    (
        "Extract key skills",
        json.dumps(
            {
                "skills": ["Python", "FastAPI", "AWS"],
                "highlights": ["Cut infra cost by 30%"],
            }
        ),
    ),
    (
        "Compare the resume against the job description",
        json.dumps({"matchScore": 72, "missingKeywords": ["Kubernetes"]}),
    ),
    ("2-line professional summary", "Senior engineer with cloud migration experience."),
    (
        "improvement suggestions",
        "- Add metrics to every role\n\n* Tighten the summary\n• Mention Kubernetes",
    ),
    ("cover letter", "Dear Hiring Manager,\n\nI am excited to apply.\n\nSincerely,"),
    (
        "interview questions",
        "1. Tell me about the AWS migration?\n"
        "2) How do you design APIs?\n"
        "Here are some questions:\n"
        "- What is your Kubernetes experience?",
    ),
    ("LinkedIn profile summary", "🚀 Senior engineer building cloud platforms."),
]


class FakeLLMClient:
    """Stands in for openai.OpenAI; routes on prompt text."""

    def __init__(self):
        self.calls = []
        self.fail_on = set()
        self.overrides = {}
        self._lock = threading.Lock()
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        text = "\n".join(m["content"] for m in kwargs["messages"])
        with self._lock:
            self.calls.append(kwargs)

        for fragment, reply in CANNED:
            if fragment in text:
                if fragment in self.fail_on:
                    raise RuntimeError(f"boom: {fragment}")
                reply = self.overrides.get(fragment, reply)
                message = SimpleNamespace(content=reply)
                return SimpleNamespace(choices=[SimpleNamespace(message=message)])
        raise AssertionError(f"unexpected prompt: {text[:80]}")

    def prompts(self):
        return ["\n".join(m["content"] for m in c["messages"]) for c in self.calls]


@pytest.fixture(autouse=True)
def no_audit_log(monkeypatch):
    monkeypatch.setattr(config, "AUDIT_LOG", "")


@pytest.fixture
def fake_llm(monkeypatch):
    fake = FakeLLMClient()
    monkeypatch.setattr(llm, "_client_instance", lambda: fake)
    return fake


@pytest.fixture
def storage():
    store = MemStorage()
    reset_storage_for_test(store)
    yield store
    reset_storage_for_test()


@pytest.fixture
def client(storage, fake_llm):
    """FastAPI TestClient with fake LLM and in-memory storage."""
    from fastapi.testclient import TestClient

    from api.main import app

    return TestClient(app)
