"""Chat model interface used by the agent loop."""

from typing import Protocol

from i18n_agent.models.llm import Message, ModelReply, ToolSpec


class ChatModel(Protocol):
    """A tool-calling chat model.

    System messages in ``messages`` carry the system prompt; the provider
    adapter decides how to transmit them.
    """

    async def complete(self, messages: list[Message], tools: list[ToolSpec]) -> ModelReply:
        """Run one completion and return the text and tool calls it produced."""
        ...
