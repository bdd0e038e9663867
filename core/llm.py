# core/llm.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from openai import OpenAI

from . import config

logger = logging.getLogger(__name__)

_client: OpenAI | None = None


class LLMError(Exception):
    """Base error for LLM calls."""


class LLMResponseError(LLMError):
    """The model answered, but not with what we asked for."""


def _client_instance() -> OpenAI:
    global _client
    if _client is None:
        _client = OpenAI(
            api_key=config.get_api_key(),
            base_url=config.LLM_BASE_URL,
            timeout=config.LLM_TIMEOUT_SECONDS,
            max_retries=config.LLM_MAX_RETRIES,
        )
    return _client


def reset_client() -> None:
    global _client
    _client = None


def _log_audit(entry: Dict[str, Any]) -> None:
    if not config.AUDIT_LOG:
        return
    try:
        with open(config.AUDIT_LOG, "a", encoding="utf-8") as f:
            entry["ts"] = datetime.now(timezone.utc).isoformat()
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    except OSError as e:
        logger.debug("audit log write failed: %s", e)


def _complete(
    model: str,
    messages: list,
    response_format: Optional[Dict[str, str]] = None,
) -> str:
    kwargs: Dict[str, Any] = {"model": model, "messages": messages}
    if response_format is not None:
        kwargs["response_format"] = response_format

    prompt_text = "\n\n".join(m["content"] for m in messages)
    try:
        resp = _client_instance().chat.completions.create(**kwargs)
    except Exception as e:
        _log_audit({"model": model, "prompt": prompt_text[:1000], "error": str(e)})
        raise

    content = (resp.choices[0].message.content or "") if resp.choices else ""
    _log_audit(
        {
            "model": model,
            "prompt": prompt_text[:1000],
            "response": content[:4000],
        }
    )
    return content.strip()


def chat_text(prompt: str, model: str) -> str:
    """Single free-text completion. Returns "" when the model says nothing."""
    return _complete(model, [{"role": "user", "content": prompt}])


def chat_json(system: str, user: str, model: str) -> Dict[str, Any]:
    """
    Single JSON-mode completion.
    Raises LLMResponseError if the reply is not a JSON object.
    """
    content = _complete(
        model,
        [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        response_format={"type": "json_object"},
    )
    try:
        data = json.loads(content or "{}")
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise LLMResponseError(
            f"expected a JSON object, got {type(data).__name__}"
        )
    return data
