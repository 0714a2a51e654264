"""LLM client abstraction for CineMatch.

This module wraps calls to an OpenAI-compatible chat endpoint (Ollama's
``/v1`` API by default) behind a clean interface that supports plain text
responses and tool-calling (function calling).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI
from pydantic import BaseModel

from cinematch.config.settings import Settings, get_settings


logger = logging.getLogger("cinematch.llm")


class LLMConfig(BaseModel):
    """Configuration for the LLM client."""

    model: str = "llama3.1:8b-instruct"
    base_url: str = "http://localhost:11434/v1"
    api_key: str = "ollama"
    max_tokens: int = 512
    temperature: float = 0.1
    request_timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LLMConfig":
        settings = settings or get_settings()
        return cls(
            model=settings.llm_model,
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            request_timeout=settings.llm_timeout,
        )


def _get_client(config: LLMConfig) -> OpenAI:
    """Return an OpenAI client pointed at the configured endpoint."""

    if not config.base_url:
        logger.error("LLM base URL is not set; LLM calls will fail")
        raise RuntimeError("LLM base URL is not set")
    return OpenAI(
        base_url=config.base_url,
        api_key=config.api_key or "ollama",
        timeout=config.request_timeout,
        max_retries=0,
    )


def _safe_json_loads(value: str) -> Any:
    """Safely parse a JSON string, returning None on failure."""

    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning("Failed to parse JSON from model output", exc_info=True)
        return None


def call_llm(
    messages: List[Dict[str, Any]],
    tools: Optional[List[Dict[str, Any]]] = None,
    config: Optional[LLMConfig] = None,
) -> Dict[str, Any]:
    """Call the chat model with optional tool schemas.

    Returns a structured dict with one of the following shapes:

    - {"type": "message", "content": str}
    - {"type": "tool", "tool_calls": [{"id", "name", "arguments"}, ...]}
    - {"type": "error", "error": str}
    """

    cfg = config or LLMConfig()

    try:
        client = _get_client(cfg)
    except RuntimeError as exc:
        return {"type": "error", "error": str(exc)}

    request: Dict[str, Any] = {
        "model": cfg.model,
        "messages": messages,
        "max_tokens": cfg.max_tokens,
        "temperature": cfg.temperature,
    }
    if tools:
        request["tools"] = tools
        request["tool_choice"] = "auto"

    try:
        response = client.chat.completions.create(**request)
    except Exception as exc:  # noqa: BLE001
        logger.error("Error while calling chat completion: %r", exc)
        return {"type": "error", "error": "LLM_CALL_FAILED"}

    if not response or not getattr(response, "choices", None):
        logger.warning("Empty response from LLM")
        return {"type": "error", "error": "EMPTY_RESPONSE"}

    message = response.choices[0].message

    # Tool call branch.
    tool_calls = getattr(message, "tool_calls", None)
    if tool_calls:
        parsed_calls: List[Dict[str, Any]] = []
        for call in tool_calls:
            fn = call.function
            raw_args = fn.arguments or "{}"
            args = _safe_json_loads(raw_args) if isinstance(raw_args, str) else raw_args
            if not isinstance(args, dict):
                args = {}
            parsed_calls.append(
                {
                    "id": call.id,
                    "name": fn.name,
                    "arguments": args,
                }
            )

        return {"type": "tool", "tool_calls": parsed_calls}

    # Normal text response branch.
    content = message.content or ""
    if isinstance(content, list):
        content = "".join(part.get("text", "") for part in content if isinstance(part, dict))

    if not isinstance(content, str):
        content = str(content)

    return {"type": "message", "content": content}
