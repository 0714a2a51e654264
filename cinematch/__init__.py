"""CineMatch: a three-state movie list driven by free-text commands."""

__version__ = "0.1.0"
