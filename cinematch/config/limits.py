"""Hard limits for the fallback agent.

These are enforced by the agent loop, not by the router or the mutation
operations.
"""

# Maximum number of LLM round-trips for a single user turn. Each tool call
# costs one step; when the budget runs out the agent apologizes instead of
# looping forever.
MAX_AGENT_STEPS = 6

# Number of past messages (user and assistant) replayed to the model.
CHAT_MEMORY_WINDOW = 6

# Tool results are truncated to this size before being sent back to the model.
MAX_TOOL_CONTENT_CHARS = 4000
