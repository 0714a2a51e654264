"""Multi-action gate.

Decides whether an utterance chains several list actions ("add Alien and
remove Heat") and should be decomposed by the generative agent instead of
the deterministic tiers. Matching is deliberately coarse and errs toward
delegation.
"""

import re

from cinematch.utils.text import fold_text


_CONNECTORS = (" and ", " then ", " et ", " puis ", ";", ".")

# Accents are folded before matching, so "enlève" is listed as "enleve".
_ACTION_VERBS = (
    "add",
    "remove",
    "delete",
    "mark",
    "ajoute",
    "ajouter",
    "mets",
    "met",
    "enleve",
    "enlever",
    "supprime",
    "supprimer",
    "retire",
    "retirer",
    "marque",
    "marquer",
)

_VERB_PATTERNS = tuple(
    (verb, re.compile(rf"\b{verb}\s")) for verb in _ACTION_VERBS
)


def count_action_verbs(utterance: str) -> int:
    """Number of distinct action verbs present in ``utterance``."""

    text = fold_text(utterance)
    return sum(1 for _verb, pattern in _VERB_PATTERNS if pattern.search(text))


def looks_like_multi_action(utterance: str) -> bool:
    """True when the utterance has a connector and two or more action verbs.

    Examples:
        >>> looks_like_multi_action("add Alien and remove Heat")
        True
        >>> looks_like_multi_action("add Alien to my list")
        False
    """

    if not utterance:
        return False

    text = fold_text(utterance)
    has_connector = any(connector in text for connector in _CONNECTORS)
    if not has_connector:
        return False
    return count_action_verbs(text) >= 2
