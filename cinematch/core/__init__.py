"""Core agent, LLM client and tool registry for CineMatch."""
