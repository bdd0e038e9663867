# core/config.py
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# --------------------------------------------------
# ENV
# --------------------------------------------------
ROOT_DIR = Path(__file__).resolve().parent.parent

ENV = os.getenv("ENV", "development")

if ENV != "production":
    load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# --------------------------------------------------
# LLM
# --------------------------------------------------
API_KEY_VARS = ("OPENAI_API_KEY", "GEMINI_API_KEY", "GOOGLE_AI_API_KEY")

LLM_BASE_URL = os.getenv("LLM_BASE_URL") or None
LLM_FAST_MODEL = os.getenv("LLM_FAST_MODEL", "gpt-4.1-mini")
LLM_SMART_MODEL = os.getenv("LLM_SMART_MODEL", "gpt-4.1")
LLM_TIMEOUT_SECONDS = _float_env("LLM_TIMEOUT_SECONDS", 60.0)
LLM_MAX_RETRIES = _int_env("LLM_MAX_RETRIES", 0)

AUDIT_LOG = os.getenv("AUDIT_LOG", "audit_llm.jsonl")

# --------------------------------------------------
# ANALYSIS / STORAGE / API
# --------------------------------------------------
ANALYSIS_MAX_WORKERS = max(1, _int_env("ANALYSIS_MAX_WORKERS", 8))

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory").strip().lower()
DUCKDB_PATH = os.getenv("DUCKDB_PATH") or str(ROOT_DIR / "resumes.duckdb")

MAX_UPLOAD_BYTES = _int_env("MAX_UPLOAD_BYTES", 10 * 1024 * 1024)

CORS_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = _int_env("PORT", 8000)


def get_api_key() -> str | None:
    """First configured LLM API key, read at call time."""
    for name in API_KEY_VARS:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


def api_key_status() -> dict[str, bool]:
    return {name: bool((os.getenv(name) or "").strip()) for name in API_KEY_VARS}
