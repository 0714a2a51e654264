"""Models package for CineMatch."""

from cinematch.models.entry import TitleEntry
from cinematch.models.intent import Intent, IntentKind
from cinematch.models.profile import Profile
from cinematch.models.recommendation import Recommendation
from cinematch.models.status import Status

__all__ = [
    "Intent",
    "IntentKind",
    "Profile",
    "Recommendation",
    "Status",
    "TitleEntry",
]
