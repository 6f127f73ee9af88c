"""Anthropic Messages API adapter for the agent loop."""

import os
from typing import Any

from anthropic import AsyncAnthropic
from anthropic.types import Message as AnthropicResponse

from i18n_agent.config import AgentConfig, get_config
from i18n_agent.models.llm import LLMUsage, Message, ModelReply, ToolCall, ToolSpec
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)


def _message_blocks(message: Message) -> list[dict[str, Any]]:
    if message.role == "tool":
        return [
            {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id,
                "content": message.content,
                "is_error": message.is_error,
            }
        ]

    blocks: list[dict[str, Any]] = []
    if message.content.strip():
        blocks.append({"type": "text", "text": message.content})
    for call in message.tool_calls:
        blocks.append({"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments})
    return blocks


def to_anthropic_payload(messages: list[Message]) -> tuple[str, list[dict[str, Any]]]:
    """Convert a transcript into the system prompt and Anthropic message list.

    Tool results travel as user-role ``tool_result`` blocks, and consecutive
    messages with the same role are merged because the API requires the roles
    to alternate.
    """
    system_parts = [message.content for message in messages if message.role == "system" and message.content]

    converted: list[dict[str, Any]] = []
    for message in messages:
        if message.role == "system":
            continue

        role = "user" if message.role in ("user", "tool") else "assistant"
        blocks = _message_blocks(message)
        if not blocks:
            continue

        if converted and converted[-1]["role"] == role:
            converted[-1]["content"].extend(blocks)
        else:
            converted.append({"role": role, "content": blocks})

    # The conversation has to open with a user turn
    while converted and converted[0]["role"] != "user":
        logger.debug("Dropping leading assistant turn from truncated history")
        converted.pop(0)

    return "\n\n".join(system_parts), converted


def to_anthropic_tools(tools: list[ToolSpec]) -> list[dict[str, Any]]:
    return [{"name": tool.name, "description": tool.description, "input_schema": tool.input_schema} for tool in tools]


def from_anthropic_response(response: AnthropicResponse) -> ModelReply:
    """Convert an Anthropic response into a provider-agnostic reply."""
    texts: list[str] = []
    tool_calls: list[ToolCall] = []

    for block in response.content:
        if block.type == "text":
            texts.append(block.text)
        elif block.type == "tool_use":
            arguments = block.input if isinstance(block.input, dict) else {}
            tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(arguments)))
        else:
            logger.debug(f"Ignoring content block of type {block.type}")

    usage = None
    if response.usage:
        usage = LLMUsage(input_tokens=response.usage.input_tokens, output_tokens=response.usage.output_tokens)

    return ModelReply(
        text="".join(texts),
        tool_calls=tool_calls,
        stop_reason=response.stop_reason,
        usage=usage,
        model=response.model,
    )


class AnthropicChatModel:
    """Tool-calling chat model backed by the Anthropic Messages API.

    The SDK's own retries are disabled: retrying and throttling belong to the
    agent loop's retry wrapper and the shared rate limiter.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        api_key: str | None = None,
        client: AsyncAnthropic | None = None,
    ):
        """Initialize the Anthropic chat model.

        Args:
            config: Agent configuration (model, temperature, limits)
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            client: Pre-built SDK client, mainly for tests
        """
        self.config = config or get_config()

        if client is None:
            anthropic_api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
            if not anthropic_api_key:
                raise ValueError("ANTHROPIC_API_KEY environment variable is required")

            client = AsyncAnthropic(
                api_key=anthropic_api_key,
                base_url=os.getenv("ANTHROPIC_BASE_URL") or None,
                timeout=self.config.request_timeout,
                max_retries=0,
            )

        self.client = client

    async def complete(self, messages: list[Message], tools: list[ToolSpec]) -> ModelReply:
        system_prompt, anthropic_messages = to_anthropic_payload(messages)

        request_params: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": anthropic_messages,
        }
        if system_prompt:
            request_params["system"] = system_prompt
        if tools:
            request_params["tools"] = to_anthropic_tools(tools)

        logger.debug(f"Creating message with {len(anthropic_messages)} messages, {len(tools)} tools")
        response = await self.client.messages.create(**request_params)

        reply = from_anthropic_response(response)
        logger.debug(f"Response received - Stop reason: {reply.stop_reason}, tool calls: {len(reply.tool_calls)}")
        return reply


_chat_model: AnthropicChatModel | None = None


def get_chat_model() -> AnthropicChatModel:
    """Get or create the Anthropic chat model instance."""
    global _chat_model
    if _chat_model is None:
        _chat_model = AnthropicChatModel()
    return _chat_model
