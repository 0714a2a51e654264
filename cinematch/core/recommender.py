"""Prompts and reply parsing for movie recommendations.

The model is asked for a strict JSON object
(``{"title", "pitch", "year", "platform"}``) but small local models often
wrap it in prose or ignore the format entirely, so every field has a
fallback.
"""

from __future__ import annotations

import json
import logging
import random
import re
from typing import Any, Dict, List, Optional

from cinematch.models.recommendation import Recommendation


logger = logging.getLogger("cinematch.recommender")

MYSTERY_TITLE = "Suggestion mystère"
RANDOM_REASON = "Suggestion IA"
FALLBACK_PLATFORMS = ("Cinéma du Coin+", "StreamFiction", "Club Cinéphile", "Festival Replay")

_JSON_FORMAT = (
    '{"title":"Titre exact","pitch":"Pourquoi ce choix","year":"(optionnel)",'
    '"platform":"Plateforme fictive ou réelle"}'
)

_FROM_LIKE_SYSTEM_PROMPT = (
    "Tu es un assistant cinéma ultra créatif. Tu connais les films existants et tu peux aussi "
    "imaginer un faux service de streaming crédible. Réponds toujours en JSON strict, sans "
    "texte supplémentaire."
)
_RANDOM_SYSTEM_PROMPT = (
    "Tu es un programmateur de ciné-club. Suggère un film ou une pépite à découvrir. "
    "Réponds uniquement avec un JSON strict."
)

_LEADING_BULLETS_RE = re.compile(r"^[\t•\-:\s]+")


def from_like_messages(liked_title: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": _FROM_LIKE_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f"Film apprécié : '{liked_title}'. Propose une recommandation nuancée avec ce "
                f"format JSON : {_JSON_FORMAT}. Le pitch doit faire le lien avec le film donné."
            ),
        },
    ]


def random_messages() -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": _RANDOM_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f"Génère une idée de film à regarder avec ce format : {_JSON_FORMAT}. "
                "Le pitch doit donner envie."
            ),
        },
    ]


def extract_json_object(raw: Optional[str]) -> Optional[str]:
    """Return the text between the first ``{`` and the last ``}``, if any."""

    if not raw:
        return None
    start = raw.find("{")
    end = raw.rfind("}")
    if start >= 0 and end > start:
        return raw[start : end + 1]
    return None


def first_meaningful_line(raw: Optional[str]) -> str:
    """First line that is not empty once bullets and colons are stripped."""

    for line in (raw or "").splitlines():
        cleaned = _LEADING_BULLETS_RE.sub("", line).strip()
        if cleaned:
            return cleaned
    return ""


def _first_non_blank(*values: Optional[str]) -> str:
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return ""


def _field(data: Dict[str, Any], name: str) -> Optional[str]:
    value = data.get(name)
    if value is None:
        return None
    return str(value)


def _parse_fields(raw: str) -> Dict[str, Any]:
    candidate = extract_json_object(raw)
    if candidate is None:
        return {}
    try:
        data = json.loads(candidate)
    except ValueError:
        logger.warning("Recommendation reply is not valid JSON: %r", raw[:200])
        return {}
    return data if isinstance(data, dict) else {}


def parse_recommendation(
    raw: Optional[str],
    default_reason: str,
    rng: Optional[random.Random] = None,
) -> Recommendation:
    """Turn a model reply into a ``Recommendation``.

    Missing fields fall back to the first meaningful line of the reply (for
    the title), ``default_reason`` (for the pitch) and a random house
    platform. A suggested year is appended to the pitch.
    """

    text = (raw or "").strip()
    fields = _parse_fields(text)

    title = _first_non_blank(_field(fields, "title"), first_meaningful_line(text), MYSTERY_TITLE)

    pitch = _first_non_blank(_field(fields, "pitch"), default_reason)
    year = _field(fields, "year")
    if year and year.strip():
        pitch = f"{pitch} (année suggérée : {year.strip()})"

    platform = _first_non_blank(
        _field(fields, "platform"),
        (rng or random).choice(FALLBACK_PLATFORMS),
    )
    return Recommendation(title=title, pitch=pitch, platform=platform)


def with_inspiration(recommendation: Recommendation, liked_title: str) -> Recommendation:
    """Make sure the pitch names the title the suggestion was based on."""

    if liked_title.casefold() in recommendation.pitch.casefold():
        return recommendation
    pitch = f"{recommendation.pitch} — Inspiré de {liked_title}"
    return recommendation.model_copy(update={"pitch": pitch})
