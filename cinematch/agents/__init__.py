"""Agents package for CineMatch.

Deterministic text classifiers: the status resolver and the multi-action
gate. The intent router lives in ``cinematch.agents.intent_router``.
"""

from cinematch.agents.multi_action import looks_like_multi_action
from cinematch.agents.status_resolver import resolve_status, status_or_default

__all__ = [
    "looks_like_multi_action",
    "resolve_status",
    "status_or_default",
]
