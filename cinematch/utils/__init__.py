"""Utility helpers for CineMatch."""
