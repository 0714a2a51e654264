"""Environment-driven settings for CineMatch.

Values come from the process environment, optionally populated from a
``.env`` file via python-dotenv.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel


DEFAULT_STORAGE_PATH = Path("data") / "storage.json"
DEFAULT_LLM_BASE_URL = "http://localhost:11434/v1"
DEFAULT_LLM_MODEL = "llama3.1:8b-instruct"


class Settings(BaseModel):
    """Resolved runtime settings."""

    storage_path: Path = DEFAULT_STORAGE_PATH
    llm_base_url: str = DEFAULT_LLM_BASE_URL
    llm_api_key: str = "ollama"
    llm_model: str = DEFAULT_LLM_MODEL
    llm_timeout: float = 30.0
    profile: str = "expert"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    """Read settings from the environment (and ``.env`` if present)."""

    load_dotenv()
    return Settings(
        storage_path=Path(os.getenv("CINEMATCH_STORAGE_PATH") or DEFAULT_STORAGE_PATH),
        llm_base_url=os.getenv("LLM_BASE_URL") or DEFAULT_LLM_BASE_URL,
        # Ollama ignores the key but the OpenAI client insists on one.
        llm_api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY") or "ollama",
        llm_model=os.getenv("LLM_MODEL") or DEFAULT_LLM_MODEL,
        llm_timeout=_env_float("LLM_TIMEOUT", 30.0),
        profile=(os.getenv("CINEMATCH_PROFILE") or "expert").strip().lower(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings for the running process."""

    return load_settings()
