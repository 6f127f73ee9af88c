"""LLM-related data models and types (provider-agnostic)."""

import json
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system", "tool"]


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Outcome of one tool invocation, paired with its call by ``tool_call_id``."""

    model_config = ConfigDict(frozen=True)

    tool_call_id: str
    name: str
    success: bool
    payload: dict[str, Any] | None = None
    error: str | None = None

    def to_content(self) -> str:
        """Serialize the result as the JSON text fed back to the model."""
        if self.payload is not None:
            return json.dumps(self.payload, ensure_ascii=False)
        return json.dumps({"success": False, "error": self.error}, ensure_ascii=False)


class Message(BaseModel):
    """A message in the agent transcript."""

    role: Role
    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_call_id: str | None = None
    name: str | None = None
    is_error: bool = False

    @classmethod
    def from_tool_result(cls, result: ToolResult) -> "Message":
        return cls(
            role="tool",
            content=result.to_content(),
            tool_call_id=result.tool_call_id,
            name=result.name,
            is_error=not result.success,
        )


@dataclass
class ToolSpec:
    """Tool schema as advertised to the model."""

    name: str
    description: str
    input_schema: dict[str, Any]


@dataclass
class LLMUsage:
    """Token usage information from the LLM provider."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def add(self, other: "LLMUsage | None") -> None:
        if other is None:
            return
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens


@dataclass
class ModelReply:
    """Provider-agnostic response from one model call."""

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    stop_reason: str | None = None
    usage: LLMUsage | None = None
    model: str | None = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def to_message(self) -> Message:
        return Message(role="assistant", content=self.text, tool_calls=list(self.tool_calls))
