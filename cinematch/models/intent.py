"""Routing decision model."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from cinematch.models.status import Status


class IntentKind(str, Enum):
    """Which tier of the router claimed an utterance."""

    CLEAR_ALL_GENERIC = "clear_all_generic"
    CLEAR_SPECIFIC = "clear_specific"
    MULTI_ACTION = "multi_action"
    BULK_ADD = "bulk_add"
    DIRECT_ACTION = "direct_action"
    DELEGATE = "delegate"


@dataclass
class Intent:
    """Decision for one utterance plus the parameters extracted from it.

    Attributes:
        kind: The tier tag.
        utterance: The raw text the decision was made on.
        titles: Extracted titles (one for direct actions, several for bulk add).
        status: Target status for clears, ``None`` when the tail was not
            recognized.
        mode: Clear mode (``"hard"`` or ``"soft"``).
        action: Direct action verb: ``dislike``, ``seen``, ``add`` or ``remove``.
        tail: Raw text after "clear all ..." for generic clears.
        request_id: Correlation id of the request being routed, set by the
            router before the handler runs.
    """

    kind: IntentKind
    utterance: str = ""
    titles: List[str] = field(default_factory=list)
    status: Optional[Status] = None
    mode: Optional[str] = None
    action: Optional[str] = None
    tail: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def title(self) -> str:
        return self.titles[0] if self.titles else ""
