"""Context building for the CineMatch fallback agent.

The system prompt combines the active profile with the user's three lists so
the model never recommends something already seen or rejected.
"""

from typing import Any, Dict, Iterable, List, Optional

from cinematch.models.profile import Profile
from cinematch.models.status import Status
from cinematch.services.list_operations import ListOperations


EMPTY_LIST_TEXT = "aucun film enregistré"

_TASTE_PROMPT = """Voici les informations sur les goûts de l'utilisateur :
Films déjà vus : {seen}
Films qu'il souhaite voir : {wishlist}
Films qu'il n'aime pas ou qui ne l'intéressent pas : {disliked}

- Ne repropose jamais un film déjà vu ou marqué comme "pas intéressé".
- Inspire-toi des films aimés pour proposer des recommandations cohérentes et variées.
- Si tu cites un film, assure-toi qu'il existe réellement.
- Si l'utilisateur te demande quels films il a vus, veut voir ou n'aime pas, réponds à partir de ces listes.
- Si une liste est vide, ignore-la naturellement dans ta réponse.
- Pour modifier ses listes, utilise les outils disponibles plutôt que de répondre sans agir."""


def _join_titles(titles: List[str]) -> str:
    return ", ".join(titles) if titles else EMPTY_LIST_TEXT


def build_system_prompt(operations: ListOperations, profile: Profile) -> str:
    """Render the profile and the current lists as one system message."""

    taste = _TASTE_PROMPT.format(
        seen=_join_titles(operations.list_by_status(Status.DEJA_VU)),
        wishlist=_join_titles(operations.list_by_status(Status.ENVIE)),
        disliked=_join_titles(operations.list_by_status(Status.PAS_INTERESSE)),
    )

    parts = [profile.system_prompt.strip(), taste]
    if profile.constraints:
        parts.append(f"Contraintes : {profile.constraints}")
    return "\n\n".join(parts)


def build_messages(
    operations: ListOperations,
    profile: Profile,
    utterance: str,
    history: Optional[Iterable[Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """Assemble the messages array for one agent turn.

    ``history`` holds previous ``user``/``assistant`` messages, oldest first.
    """

    messages: List[Dict[str, Any]] = [
        {"role": "system", "content": build_system_prompt(operations, profile)}
    ]

    for msg in history or []:
        role = msg.get("role")
        content = msg.get("content")
        if role not in {"user", "assistant"} or not content:
            continue
        messages.append({"role": role, "content": str(content)})

    messages.append({"role": "user", "content": utterance})
    return messages
