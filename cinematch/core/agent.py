"""Generative fallback agent for CineMatch.

Utterances the intent router cannot resolve deterministically end up here.
The agent runs a bounded tool-calling loop against the chat model, letting it
mutate the list through the same operations the router uses.
"""

from __future__ import annotations

import json
import logging
import random
import threading
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from cinematch.agents.intent_router import IntentRouter
from cinematch.config.limits import CHAT_MEMORY_WINDOW, MAX_AGENT_STEPS, MAX_TOOL_CONTENT_CHARS
from cinematch.config.settings import Settings, get_settings
from cinematch.core.context import build_messages
from cinematch.core.llm import LLMConfig, call_llm
from cinematch.core.recommender import (
    RANDOM_REASON,
    from_like_messages,
    parse_recommendation,
    random_messages,
    with_inspiration,
)
from cinematch.core.tools import ToolBox
from cinematch.models.profile import Profile
from cinematch.models.recommendation import Recommendation
from cinematch.services.list_operations import ListOperations
from cinematch.services.list_store import JsonListStore
from cinematch.utils.logger import log_error, log_info


logger = logging.getLogger("cinematch.agent")

LLM_ERROR_MESSAGE = "Error: I couldn't complete that request. Please try again."
EMPTY_ANSWER_MESSAGE = "I don't have a good answer for that yet."
BAD_TOOL_REQUEST_MESSAGE = "Sorry, I could not understand the tool request."
UNEXPECTED_RESULT_MESSAGE = "Sorry, I received an unexpected response from my reasoning engine."
STUCK_MESSAGE = (
    "I got stuck while trying to complete that request. Please rephrase or "
    "break it into a smaller step and I'll try again."
)

_DESCRIBE_SYSTEM_PROMPT = "Tu es un critique cinéma. Donne une courte description, sans spoiler."


def _truncate(content: str, limit: int = MAX_TOOL_CONTENT_CHARS) -> str:
    if len(content) > limit:
        return content[:limit] + "...[truncated]"
    return content


def _tool_content(result: Any) -> str:
    if isinstance(result, str):
        return _truncate(result)
    return _truncate(json.dumps(result, ensure_ascii=False, default=str))


def profile_for(name: Optional[str]) -> Profile:
    """Map a settings profile name to a ``Profile``."""

    if (name or "").strip().lower() in {"humor", "humour", "critic", "humoristic"}:
        return Profile.humoristic_critic()
    return Profile.default_cinema_expert()


class MovieAgent:
    """Tool-calling agent bound to one movie list.

    The agent keeps the last ``CHAT_MEMORY_WINDOW`` user/assistant messages
    and replays them on every turn. Tool calls are executed in order; each
    LLM round-trip costs one of ``MAX_AGENT_STEPS`` steps.
    """

    def __init__(
        self,
        operations: ListOperations,
        profile: Optional[Profile] = None,
        config: Optional[LLMConfig] = None,
        max_steps: int = MAX_AGENT_STEPS,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.operations = operations
        self.profile = profile or Profile.default_cinema_expert()
        self.config = config or LLMConfig()
        self.max_steps = max_steps
        self.rng = rng or random.Random()
        self.tools = ToolBox(operations, describer=self.describe_movie, recommender=self)
        self._history: Deque[Dict[str, str]] = deque(maxlen=CHAT_MEMORY_WINDOW)
        self._history_lock = threading.Lock()

    @property
    def history(self) -> List[Dict[str, str]]:
        with self._history_lock:
            return list(self._history)

    def _remember(self, utterance: str, reply: str) -> None:
        with self._history_lock:
            self._history.append({"role": "user", "content": utterance})
            self._history.append({"role": "assistant", "content": reply})

    def respond(self, utterance: str, request_id: Optional[str] = None) -> str:
        """Answer one utterance, possibly after several tool calls."""

        messages: List[Dict[str, Any]] = build_messages(
            self.operations, self.profile, utterance, self.history
        )
        tool_schemas = self.tools.get_tool_schemas()

        for step in range(self.max_steps):
            llm_result = call_llm(messages, tools=tool_schemas, config=self.config)
            result_type = llm_result.get("type")

            if result_type == "error":
                log_error(
                    "LLM call failed",
                    request_id=request_id,
                    channel="agent",
                    error=str(llm_result.get("error")),
                    step=step,
                )
                return LLM_ERROR_MESSAGE

            if result_type == "message":
                final_text = llm_result.get("content", "") or EMPTY_ANSWER_MESSAGE
                self._remember(utterance, final_text)
                log_info("Agent finished", request_id=request_id, channel="agent", steps=step + 1)
                return final_text

            if result_type == "tool":
                tool_calls = llm_result.get("tool_calls") or []
                if not tool_calls:
                    logger.warning("Tool result type without tool_calls payload")
                    return BAD_TOOL_REQUEST_MESSAGE

                messages.append(
                    {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [
                            {
                                "id": call.get("id") or f"tool-call-{i}",
                                "type": "function",
                                "function": {
                                    "name": call.get("name", ""),
                                    "arguments": json.dumps(call.get("arguments") or {}),
                                },
                            }
                            for i, call in enumerate(tool_calls)
                        ],
                    }
                )

                for i, call in enumerate(tool_calls):
                    tool_name = call.get("name", "")
                    tool_result = self.tools.run_tool(tool_name, call.get("arguments") or {})
                    log_info(
                        "Tool executed",
                        request_id=request_id,
                        channel="agent",
                        tool=tool_name,
                    )
                    messages.append(
                        {
                            "role": "tool",
                            "tool_call_id": call.get("id") or f"tool-call-{i}",
                            "name": tool_name,
                            "content": _tool_content(tool_result),
                        }
                    )
                continue

            logger.warning("Unexpected LLM result type: %r", result_type)
            return UNEXPECTED_RESULT_MESSAGE

        log_error("Agent step budget exhausted", request_id=request_id, channel="agent")
        return STUCK_MESSAGE

    def describe_movie(self, title: str) -> str:
        """Short spoiler-free description of a title, or ``""`` on failure."""

        messages = [
            {"role": "system", "content": _DESCRIBE_SYSTEM_PROMPT},
            {"role": "user", "content": f"Film : {title}"},
        ]
        return self._complete(messages, purpose=f"describe {title!r}")

    def recommend_from_like(self, liked_title: str) -> Recommendation:
        """Suggest a movie in the spirit of ``liked_title``.

        The pitch always names the liked title, even when the model forgot to.
        """

        liked = liked_title.strip()
        raw = self._complete(from_like_messages(liked), purpose="recommend from like")
        recommendation = parse_recommendation(raw, f"Inspiré de {liked}", self.rng)
        return with_inspiration(recommendation, liked)

    def recommend_random(self) -> Recommendation:
        """Suggest a movie to discover, independent of the lists."""

        raw = self._complete(random_messages(), purpose="random recommendation")
        return parse_recommendation(raw, RANDOM_REASON, self.rng)

    def _complete(self, messages: List[Dict[str, Any]], purpose: str) -> str:
        """One tool-less completion; ``""`` when the model call fails."""

        result = call_llm(messages, config=self.config)
        if result.get("type") != "message":
            logger.warning("LLM call for %s failed: %s", purpose, result.get("error"))
            return ""
        return (result.get("content") or "").strip()


def build_router(settings: Optional[Settings] = None) -> IntentRouter:
    """Wire store, operations, agent and router from settings."""

    settings = settings or get_settings()
    store = JsonListStore(settings.storage_path)
    operations = ListOperations(store)
    config = LLMConfig.from_settings(settings)
    agent = MovieAgent(operations, profile=profile_for(settings.profile), config=config)
    logger.info(
        "Router ready (storage=%s, model=%s, profile=%s)",
        settings.storage_path,
        settings.llm_model,
        agent.profile.name,
    )
    return IntentRouter(operations, agent)
