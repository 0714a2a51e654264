"""Services package for CineMatch."""

from cinematch.services.list_operations import ListOperations
from cinematch.services.list_store import JsonListStore, ListStore

__all__ = [
    "JsonListStore",
    "ListOperations",
    "ListStore",
]
