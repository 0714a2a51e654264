"""Formatting helpers for user-facing replies."""

from cinematch.models.status import Status


def pluralize(count: int, singular: str, plural: str = "") -> str:
    """Return ``"<count> <word>"`` with the word agreeing with ``count``."""

    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def quote_status(status: Status) -> str:
    return f"“{status.label}”"

