"""
Tests for core.llm: JSON handling and the audit log.
"""

from __future__ import annotations

import json

import pytest

from core import config, llm
from core.llm import LLMResponseError


def test_chat_text_strips_reply(fake_llm):
    fake_llm.overrides["2-line professional summary"] = "  spaced out  \n"
    assert llm.chat_text("write a 2-line professional summary", "m") == "spaced out"
    assert fake_llm.calls[0]["messages"] == [
        {"role": "user", "content": "write a 2-line professional summary"}
    ]


def test_chat_json_parses_object(fake_llm):
    data = llm.chat_json("Rate the given resume", "resume", "m")
    assert data == {"rating": 8, "explanation": "Clear and quantified."}


def test_chat_json_rejects_invalid(fake_llm):
    fake_llm.overrides["Rate the given resume"] = "{broken"
    with pytest.raises(LLMResponseError, match="invalid JSON"):
        llm.chat_json("Rate the given resume", "resume", "m")


def test_chat_json_rejects_non_object(fake_llm):
    fake_llm.overrides["Rate the given resume"] = "[1, 2]"
    with pytest.raises(LLMResponseError, match="JSON object"):
        llm.chat_json("Rate the given resume", "resume", "m")


def test_sdk_errors_propagate(fake_llm):
    fake_llm.fail_on.add("Rate the given resume")
    with pytest.raises(RuntimeError, match="boom"):
        llm.chat_json("Rate the given resume", "resume", "m")


def test_audit_log_records_calls_and_errors(fake_llm, monkeypatch, tmp_path):
    path = tmp_path / "audit.jsonl"
    monkeypatch.setattr(config, "AUDIT_LOG", str(path))

    llm.chat_json("Rate the given resume", "resume", "model-a")
    fake_llm.fail_on.add("Extract key skills")
    with pytest.raises(RuntimeError):
        llm.chat_json("Extract key skills", "resume", "model-b")

    entries = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert len(entries) == 2
    assert entries[0]["model"] == "model-a"
    assert "rating" in entries[0]["response"]
    assert "ts" in entries[0]
    assert entries[1]["model"] == "model-b"
    assert "boom" in entries[1]["error"]


def test_client_built_from_config(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("GEMINI_API_KEY", "gm-test-key")
    monkeypatch.setattr(config, "LLM_BASE_URL", "https://example.invalid/v1/")
    llm.reset_client()
    try:
        client = llm._client_instance()
        assert client.api_key == "gm-test-key"
        assert str(client.base_url).startswith("https://example.invalid/v1")
        assert llm._client_instance() is client
    finally:
        llm.reset_client()
