"""Building blocks of a tool-driven ReAct agent: tool calls, streamed chat and conversation context management."""

__version__ = "0.1.0"