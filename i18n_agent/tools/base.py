"""Base types and definitions for tools."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, Field

from i18n_agent.models.llm import ToolSpec

ToolKind = Literal["read", "write"]
ToolHandler = Callable[[Any], Awaitable[dict[str, Any]]]

# Namespace in lowercase, then one or more dot-separated identifiers (e.g. common.loading, error.notFound)
TRANSLATION_KEY_PATTERN = r"^[a-z][a-z0-9_-]*(\.[A-Za-z0-9_-]+)+$"


def translation_key_field(**kwargs: Any) -> Any:
    """Field definition shared by every tool argument that carries a translation key."""
    return Field(
        ...,
        description="Translation key, a namespaced dot-string such as common.agree",
        pattern=TRANSLATION_KEY_PATTERN,
        max_length=200,
        examples=["common.loading", "button.submit", "error.notFound"],
        **kwargs,
    )


def lookup_key_field(**kwargs: Any) -> Any:
    """Key field for read tools, which must find any key the store holds."""
    return Field(
        ...,
        description="Translation key to look up, such as common.agree",
        min_length=1,
        max_length=200,
        examples=["common.loading", "button.submit"],
        **kwargs,
    )


@dataclass
class ToolDefinition:
    """Definition of a tool available to the assistant."""

    name: str
    description: str
    input_schema_class: type[BaseModel]
    handler: ToolHandler
    kind: ToolKind = "read"

    @property
    def is_write(self) -> bool:
        return self.kind == "write"

    def get_json_schema(self) -> dict[str, Any]:
        """Get JSON schema for this tool's input."""
        return self.input_schema_class.model_json_schema()

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input."""
        return self.input_schema_class.model_validate(raw_input)

    def to_spec(self) -> ToolSpec:
        return ToolSpec(name=self.name, description=self.description, input_schema=self.get_json_schema())
