"""Tool definitions and execution for the CineMatch agent.

Every list mutation the router can perform is also exposed to the model as
an OpenAI-style function tool, so the agent and the router share a single
mutation surface.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from cinematch.services.list_operations import ListOperations


logger = logging.getLogger("cinematch.tools")

ToolExecutor = Callable[..., Any]

_STATUS_DESCRIPTION = "One of 'envie', 'deja_vu' or 'pas_interesse'."


def _schema(name: str, description: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


def _string(description: str) -> Dict[str, str]:
    return {"type": "string", "description": description}


class ToolBox:
    """Registry of tool schemas and executors bound to one list.

    Args:
        operations: Mutation operations the tools delegate to.
        describer: Optional ``title -> description`` callable used by
            ``pick_next_to_watch``.
        recommender: Optional object with ``recommend_from_like(title)`` and
            ``recommend_random()``; the recommendation tools are only
            registered when it is given.
    """

    def __init__(
        self,
        operations: ListOperations,
        describer: Optional[Callable[[str], str]] = None,
        recommender: Optional[Any] = None,
    ) -> None:
        self.operations = operations
        self.describer = describer
        self.recommender = recommender
        self._executors: Dict[str, ToolExecutor] = {}
        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._init_default_tools()
        if recommender is not None:
            self._init_recommendation_tools()

    def _register_tool(self, name: str, schema: Dict[str, Any], executor: ToolExecutor) -> None:
        """Register a tool with its OpenAI tool schema and executor."""

        self._executors[name] = executor
        self._schemas[name] = schema

    def _init_default_tools(self) -> None:
        ops = self.operations
        title_prop = _string("Exact movie title.")

        self._register_tool(
            "add_to_wishlist",
            _schema(
                "add_to_wishlist",
                "Add a movie to the wishlist (status 'envie').",
                {"title": title_prop},
                ["title"],
            ),
            lambda title: ops.add(title),
        )
        self._register_tool(
            "add_many_to_wishlist",
            _schema(
                "add_many_to_wishlist",
                "Add several movies to the wishlist. Titles are separated by commas or newlines.",
                {"titles": _string("Comma or newline separated titles.")},
                ["titles"],
            ),
            lambda titles: ops.add_many(titles),
        )
        self._register_tool(
            "remove_from_wishlist",
            _schema(
                "remove_from_wishlist",
                "Remove a movie from the wishlist by marking it 'pas_interesse'.",
                {"title": title_prop},
                ["title"],
            ),
            lambda title: ops.remove(title),
        )
        self._register_tool(
            "mark_as_seen",
            _schema("mark_as_seen", "Mark a movie as 'deja_vu'.", {"title": title_prop}, ["title"]),
            lambda title: ops.mark_seen(title),
        )
        self._register_tool(
            "mark_as_disliked",
            _schema("mark_as_disliked", "Mark a movie as 'pas_interesse'.", {"title": title_prop}, ["title"]),
            lambda title: ops.mark_disliked(title),
        )
        self._register_tool(
            "set_status",
            _schema(
                "set_status",
                "Change the status of a movie.",
                {"title": title_prop, "status": _string(_STATUS_DESCRIPTION)},
                ["title", "status"],
            ),
            lambda title, status: ops.set_status(title, status),
        )
        self._register_tool(
            "set_many_status",
            _schema(
                "set_many_status",
                "Apply one status to several movies (comma or newline separated).",
                {
                    "titles": _string("Comma or newline separated titles."),
                    "status": _string(_STATUS_DESCRIPTION),
                },
                ["titles", "status"],
            ),
            lambda titles, status: ops.bulk_set_status(titles, status),
        )
        self._register_tool(
            "get_list_by_status",
            _schema(
                "get_list_by_status",
                "Return the movies of one list. Defaults to the wishlist.",
                {"status": _string(_STATUS_DESCRIPTION)},
                [],
            ),
            lambda status="envie": ops.list_by_status(status),
        )
        self._register_tool(
            "get_list_by_status_sorted",
            _schema(
                "get_list_by_status_sorted",
                "Return the movies of one list sorted alphabetically.",
                {
                    "status": _string(_STATUS_DESCRIPTION),
                    "order": {"type": "string", "enum": ["asc", "desc"]},
                },
                ["status"],
            ),
            lambda status, order="asc": ops.sorted_list(status, order),
        )
        self._register_tool(
            "clear_status",
            _schema(
                "clear_status",
                "Empty a whole list. mode='hard' deletes the entries, 'soft' moves them to another list.",
                {
                    "status": _string(_STATUS_DESCRIPTION),
                    "mode": {"type": "string", "enum": ["hard", "soft"]},
                },
                ["status"],
            ),
            lambda status, mode="hard": ops.clear(status, mode),
        )
        self._register_tool(
            "prune_blanks_in_status",
            _schema(
                "prune_blanks_in_status",
                "Hide empty or quotes-only entries of a list by marking them 'pas_interesse'.",
                {"status": _string(_STATUS_DESCRIPTION)},
                ["status"],
            ),
            lambda status: ops.prune_blanks(status),
        )
        self._register_tool(
            "rename_title",
            _schema(
                "rename_title",
                "Rename a title: copy its status to the new title and mark the old one 'pas_interesse'.",
                {"old_title": _string("Current title."), "new_title": _string("New title.")},
                ["old_title", "new_title"],
            ),
            lambda old_title, new_title: ops.rename(old_title, new_title),
        )
        self._register_tool(
            "get_stats",
            _schema("get_stats", "Count the movies in each list.", {}, []),
            lambda: ops.stats(),
        )
        self._register_tool(
            "pick_next_to_watch",
            _schema(
                "pick_next_to_watch",
                "Suggest the next movie to watch from the wishlist.",
                {
                    "strategy": {"type": "string", "enum": ["random", "first"]},
                    "with_description": {"type": "boolean"},
                },
                [],
            ),
            lambda strategy="random", with_description=False: ops.pick_next(
                strategy, with_description, describe=self.describer
            ),
        )

    def _init_recommendation_tools(self) -> None:
        recommender = self.recommender

        self._register_tool(
            "recommend_from_liked_title",
            _schema(
                "recommend_from_liked_title",
                "Suggest one movie close to a movie the user liked. Returns title, pitch and platform.",
                {"liked_title": _string("A movie the user enjoyed.")},
                ["liked_title"],
            ),
            lambda liked_title: recommender.recommend_from_like(liked_title).model_dump(),
        )
        self._register_tool(
            "recommend_random_movie",
            _schema(
                "recommend_random_movie",
                "Suggest one movie to discover, unrelated to the lists. Returns title, pitch and platform.",
                {},
                [],
            ),
            lambda: recommender.recommend_random().model_dump(),
        )

    @property
    def names(self) -> List[str]:
        return list(self._executors)

    def get_tool_schemas(self) -> List[Dict[str, Any]]:
        """Return OpenAI-compatible tool schemas for all registered tools."""

        return list(self._schemas.values())

    def run_tool(self, name: str, args: Optional[Dict[str, Any]] = None) -> Any:
        """Execute a named tool with the provided arguments.

        Returns tool output or an error structure if the call fails.
        """

        executor = self._executors.get(name)
        if not executor:
            logger.error("Requested unknown tool: %s", name)
            return {"error": "UNKNOWN_TOOL", "tool": name}

        safe_args = dict(args or {})
        logger.info("[TOOL CALL] %s with args: %s", name, safe_args)

        try:
            return executor(**safe_args)
        except TypeError as exc:
            logger.error("[TOOL ERROR] Invalid arguments for tool %s: %s (%r)", name, safe_args, exc)
            return {"error": "INVALID_ARGUMENTS", "tool": name, "detail": str(exc)}
        except Exception as exc:  # noqa: BLE001
            logger.error("Error while executing tool %s: %r", name, exc)
            return {"error": "TOOL_EXECUTION_FAILED", "tool": name}
