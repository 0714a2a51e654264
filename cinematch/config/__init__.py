"""Configuration package for CineMatch."""

from cinematch.config.limits import (
    CHAT_MEMORY_WINDOW,
    MAX_AGENT_STEPS,
    MAX_TOOL_CONTENT_CHARS,
)
from cinematch.config.settings import Settings, get_settings

__all__ = [
    "CHAT_MEMORY_WINDOW",
    "MAX_AGENT_STEPS",
    "MAX_TOOL_CONTENT_CHARS",
    "Settings",
    "get_settings",
]
