"""Intent router for free-text list commands.

Each utterance walks an ordered chain of tiers. A tier pairs a matcher
(pure, returns an ``Intent`` or ``None``) with a handler (applies the
mutation and returns the reply, or ``None`` to let the next tier try). The
first tier that produces a reply wins, so earlier tiers always take
precedence:

1. generic clear-all ("clear all in seen", "supprime tout dans envie")
2. legacy clear phrasings ("clear the wishlist")
3. multi-action utterances, delegated to the agent
4. client-side bulk add ("Add Alien, Heat, Drive to my wishlist")
5. direct single actions (dislike, seen, add, remove)
6. delegation of anything else to the agent

The router holds no state between calls. It never raises: failures are
logged and turned into an apology string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from cinematch.agents.multi_action import looks_like_multi_action
from cinematch.agents.status_resolver import resolve_status
from cinematch.models.intent import Intent, IntentKind
from cinematch.models.status import Status
from cinematch.services.list_operations import ListOperations
from cinematch.utils.logger import log_error, log_info, log_warn
from cinematch.utils.text import has_title_separator, normalize_title, split_titles


class Agent(Protocol):
    """The generative fallback. Replies are returned to the user unmodified."""

    def respond(self, utterance: str, request_id: Optional[str] = None) -> str: ...


@dataclass(frozen=True)
class Tier:
    """One stage of the routing chain."""

    name: str
    match: Callable[[str], Optional[Intent]]
    handle: Callable[[Intent], Optional[str]]


UNKNOWN_CLEAR_TARGET_MESSAGE = (
    "Sorry, status not recognized. Say “clear all in wishlist”, "
    "“clear all in not interested” or “clear all in seen”."
)
EMPTY_UTTERANCE_MESSAGE = "Tell me what to do with your movie list."
ROUTER_FAILURE_MESSAGE = "Sorry, I ran into an error while updating your list."
AGENT_FAILURE_MESSAGE = "Sorry, I couldn't reach the movie assistant. Please try again."

_I = re.IGNORECASE

# Tier 1 --------------------------------------------------------------------

_CLEAR_ALL_RE = re.compile(
    r"\b(?:supprime[rz]?|enl[eè]ve[rz]?|vide[rz]?|efface[rz]?|clear|remove|delete|empty)\s+"
    r"(?:toutes|tous|tout|all|everything)"
    r"(?:\s+(?:dans|de|du|des|la|le|les|in|from|of|the))?"
    r"\s+(?P<tail>.*)$",
    _I | re.DOTALL,
)

# Tier 2 --------------------------------------------------------------------

_CLEAR_VERB = r"\b(?:supprime[rz]?|enl[eè]ve[rz]?|vide[rz]?|efface[rz]?|clear|empty|delete|wipe)"
_CLEAR_SCOPE = r"\s+(?:(?:toutes|tous|tout)\b.*?|(?:(?:the|my|ma|la|le|mes|les|list|liste)\s+)*)"

_LEGACY_CLEARS: Tuple[Tuple[re.Pattern, Status], ...] = (
    (
        re.compile(
            _CLEAR_VERB + _CLEAR_SCOPE
            + r"(?:wish\s*list|liste\s*d['’]\s*envie|envies?)\b",
            _I,
        ),
        Status.ENVIE,
    ),
    (
        re.compile(
            _CLEAR_VERB + _CLEAR_SCOPE
            + r"(?:pas[\s_-]*int[eé]ress[eé]e?s?|not[\s_-]*interested)",
            _I,
        ),
        Status.PAS_INTERESSE,
    ),
    (
        re.compile(
            _CLEAR_VERB + _CLEAR_SCOPE
            + r"(?:d[eé]j[aà][\s_-]*vus?|already[\s_-]*seen|seen)\b",
            _I,
        ),
        Status.DEJA_VU,
    ),
)

# Tier 4 --------------------------------------------------------------------

_ADD_VERB = r"\b(?:ajouter|ajoutez|ajoute|mets|met|add)\b"
_ADD_VERB_RE = re.compile(_ADD_VERB, _I)
_VERB_PREFIX_RE = re.compile(r"^.*?" + _ADD_VERB + r"\s*", _I | re.DOTALL)
_LIST_TAIL_RE = re.compile(
    r"\s+(?:dans|à|a|to|into|in)\s*(?:ma|la|my|the)?\s*"
    r"(?:wish\s*list|watch\s*list|liste\s*d['’]\s*envie|liste|list)[.!?\s]*$",
    _I,
)

# Tier 5 --------------------------------------------------------------------

_REMOVE_VERB = r"\b(?:remove|delete|enl[eè]ve[rz]?|supprime[rz]?|retire[rz]?)"
_LIST_NAME = r"(?:liste(?:\s*d['’]\s*envie)?|wish\s*list|watch\s*list|list)"

_DIRECT_ACTIONS: Tuple[Tuple[str, re.Pattern], ...] = (
    (
        "dislike",
        re.compile(
            r"\b(?:je\s+ne\s+suis\s+pas\s+int[eé]ress[eé]e?s?\s+par"
            r"|je\s+n['’]?\s*aime\s+pas"
            r"|not\s+interested\s+in"
            r"|(?:do\s+not|don['’]?t)\s+like)"
            r"\s+(?P<title>.+)$",
            _I,
        ),
    ),
    (
        "seen",
        re.compile(
            r"\b(?:j['’]?\s*ai\s+(?:d[eé]j[aà]\s+)?vu"
            r"|marque[rz]?[- ]?le\s+d[eé]j[aà][- ]?vu"
            r"|i\s*['’]?\s*ve\s+(?:already\s+)?seen"
            r"|i\s+have\s+(?:already\s+)?seen"
            r"|i\s+(?:already\s+)?saw)"
            r"\s+(?P<title>.+)$",
            _I,
        ),
    ),
    (
        "seen",
        re.compile(
            r"\b(?:mark|marque[rz]?)\s+(?P<title>.+?)\s+(?:as\s+|comme\s+|en\s+)?"
            r"(?:seen|watched|d[eé]j[aà][\s_-]*vu)[\s.!?]*$",
            _I,
        ),
    ),
    (
        "add",
        re.compile(
            _ADD_VERB + r"\s+(?P<title>.+?)"
            r"(?:\s+(?:to|into|in|à|a|dans)\s+(?:(?:my|the|ma|la)\s+)?" + _LIST_NAME + r")?"
            r"[\s.!?]*$",
            _I,
        ),
    ),
    (
        "remove",
        re.compile(
            _REMOVE_VERB + r"\s+(?P<title>.+?)\s+(?:from|du|de|d['’]e?)\s*"
            r"(?:(?:my|the|ma|la)\s+)?" + _LIST_NAME + r"\b",
            _I,
        ),
    ),
    (
        "remove_solo",
        re.compile(_REMOVE_VERB + r"\s+(?P<title>.+)$", _I),
    ),
)

# "remove all ..." that slipped past tier 1 is left to the agent.
_CLEAR_ALL_PREFIX_RE = re.compile(r"^(?:all|everything|toutes|tous|tout)\b", _I)

_DIRECT_REPLIES = {
    "dislike": "“{title}” marked as not interested.",
    "seen": "“{title}” marked as already seen.",
    "add": "“{title}” added to your wishlist.",
    "remove": "“{title}” removed from your wishlist.",
}


# ---------------------------------------------------------------------------
# Matchers (pure)
# ---------------------------------------------------------------------------


def match_clear_all(utterance: str) -> Optional[Intent]:
    m = _CLEAR_ALL_RE.search(utterance)
    if not m:
        return None
    tail = m.group("tail").strip()
    return Intent(
        kind=IntentKind.CLEAR_ALL_GENERIC,
        utterance=utterance,
        status=resolve_status(tail),
        mode="hard",
        tail=tail,
    )


def match_legacy_clear(utterance: str) -> Optional[Intent]:
    for pattern, status in _LEGACY_CLEARS:
        if pattern.search(utterance):
            return Intent(
                kind=IntentKind.CLEAR_SPECIFIC,
                utterance=utterance,
                status=status,
                mode="hard",
            )
    return None


def match_multi_action(utterance: str) -> Optional[Intent]:
    if looks_like_multi_action(utterance):
        return Intent(kind=IntentKind.MULTI_ACTION, utterance=utterance)
    return None


def extract_bulk_titles(utterance: str) -> str:
    """Strip the add verb prefix and a trailing "... to my wishlist" clause."""

    without_verb = _VERB_PREFIX_RE.sub("", utterance, count=1)
    without_tail = _LIST_TAIL_RE.sub("", without_verb, count=1)
    return without_tail.strip()


def match_bulk_add(utterance: str) -> Optional[Intent]:
    if not _ADD_VERB_RE.search(utterance) or not has_title_separator(utterance):
        return None
    titles = split_titles(extract_bulk_titles(utterance))
    if not titles:
        return None
    return Intent(kind=IntentKind.BULK_ADD, utterance=utterance, titles=titles)


def match_direct_action(utterance: str) -> Optional[Intent]:
    for action, pattern in _DIRECT_ACTIONS:
        m = pattern.search(utterance)
        if not m:
            continue
        title = normalize_title(m.group("title"))
        if not title:
            continue
        if action == "remove_solo":
            if _CLEAR_ALL_PREFIX_RE.match(title):
                continue
            action = "remove"
        return Intent(
            kind=IntentKind.DIRECT_ACTION,
            utterance=utterance,
            titles=[title],
            action=action,
        )
    return None


def match_delegate(utterance: str) -> Optional[Intent]:
    return Intent(kind=IntentKind.DELEGATE, utterance=utterance)


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class IntentRouter:
    """Routes one utterance to list mutations or to the fallback agent.

    Args:
        operations: Mutation operations bound to the user's store.
        agent: Anything with ``respond(utterance, request_id=None) -> str``.
    """

    def __init__(self, operations: ListOperations, agent: Agent) -> None:
        self.operations = operations
        self.agent = agent
        self._tiers: List[Tier] = [
            Tier("clear_all_generic", match_clear_all, self._handle_clear),
            Tier("clear_specific", match_legacy_clear, self._handle_clear),
            Tier("multi_action", match_multi_action, self._delegate),
            Tier("bulk_add", match_bulk_add, self._handle_bulk_add),
            Tier("direct_action", match_direct_action, self._handle_direct_action),
            Tier("delegate", match_delegate, self._delegate),
        ]

    @property
    def tiers(self) -> Sequence[Tier]:
        """The routing chain, highest priority first."""

        return tuple(self._tiers)

    def classify(self, utterance: str) -> Intent:
        """Return the first matching intent without touching the store.

        A bulk add or direct action classified here can still fall through
        at routing time if the operation reports an error.
        """

        text = utterance or ""
        for tier in self._tiers:
            intent = tier.match(text)
            if intent is not None:
                return intent
        return Intent(kind=IntentKind.DELEGATE, utterance=text)

    def route(self, utterance: Optional[str], request_id: Optional[str] = None) -> str:
        """Handle one utterance and return the reply to show the user."""

        text = utterance or ""
        if not text.strip():
            return EMPTY_UTTERANCE_MESSAGE

        for tier in self._tiers:
            try:
                intent = tier.match(text)
                if intent is None:
                    continue
                intent.request_id = request_id
                reply = tier.handle(intent)
            except Exception as exc:  # noqa: BLE001
                log_error(
                    "Routing tier failed",
                    request_id=request_id,
                    tier=tier.name,
                    error=repr(exc),
                )
                return ROUTER_FAILURE_MESSAGE

            if reply is None:
                continue

            log_info(
                "Utterance routed",
                request_id=request_id,
                tier=tier.name,
                action=intent.action,
                status=intent.status.value if intent.status else None,
            )
            return reply

        return AGENT_FAILURE_MESSAGE

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _handle_clear(self, intent: Intent) -> Optional[str]:
        if intent.status is None:
            log_warn("Clear target not recognized", request_id=intent.request_id, tail=intent.tail)
            return UNKNOWN_CLEAR_TARGET_MESSAGE
        return self.operations.clear(intent.status, intent.mode or "hard")

    def _handle_bulk_add(self, intent: Intent) -> Optional[str]:
        joined = ", ".join(intent.titles)
        result = self.operations.add(joined)
        if result.startswith("ADDED_MANY:"):
            count = result.split(":", 1)[1]
        elif result.startswith("ADDED:"):
            count = "1"
        else:
            return None
        return f"Added to your wishlist: {joined} ({count})"

    def _handle_direct_action(self, intent: Intent) -> Optional[str]:
        title = intent.title
        if intent.action == "dislike":
            result = self.operations.mark_disliked(title)
        elif intent.action == "seen":
            result = self.operations.mark_seen(title)
        elif intent.action == "add":
            result = self.operations.add(title)
        elif intent.action == "remove":
            result = self.operations.remove(title)
        else:
            return None

        if result.startswith("ERROR:"):
            return None
        return _DIRECT_REPLIES[intent.action].format(title=title)

    def _delegate(self, intent: Intent) -> Optional[str]:
        try:
            reply = self.agent.respond(intent.utterance, request_id=intent.request_id)
        except Exception as exc:  # noqa: BLE001
            log_error(
                "Agent delegation failed",
                request_id=intent.request_id,
                tier=intent.kind.value,
                error=repr(exc),
            )
            return AGENT_FAILURE_MESSAGE
        if reply is None:
            return ""
        return reply
