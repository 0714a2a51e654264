"""Movie recommendation model."""

from pydantic import BaseModel


class Recommendation(BaseModel):
    """One suggested movie, ready to show to the user."""

    title: str
    pitch: str
    platform: str
