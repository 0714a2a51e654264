"""Canonical list statuses."""

from enum import Enum


class Status(str, Enum):
    """The three buckets a title can live in."""

    ENVIE = "envie"
    DEJA_VU = "deja_vu"
    PAS_INTERESSE = "pas_interesse"

    @property
    def label(self) -> str:
        """Human-readable bucket name used in response sentences."""

        return _LABELS[self]

    def __str__(self) -> str:
        return self.value


_LABELS = {
    Status.ENVIE: "wishlist",
    Status.DEJA_VU: "already seen",
    Status.PAS_INTERESSE: "not interested",
}

# Soft clear moves a bucket's titles to this successor.
SOFT_CLEAR_SUCCESSOR = {
    Status.ENVIE: Status.PAS_INTERESSE,
    Status.PAS_INTERESSE: Status.DEJA_VU,
    Status.DEJA_VU: Status.PAS_INTERESSE,
}

# Bucket search order when looking up a title's current status.
LOOKUP_ORDER = (Status.ENVIE, Status.PAS_INTERESSE, Status.DEJA_VU)
