"""Tools registry for managing assistant tools."""

import time

from pydantic import ValidationError

from i18n_agent.errors import StoreError
from i18n_agent.models.llm import ToolCall, ToolResult, ToolSpec
from i18n_agent.services.translation_store import TranslationStore
from i18n_agent.tools.base import ToolDefinition
from i18n_agent.tools.languages import create_get_default_language_tool, create_get_languages_tool
from i18n_agent.tools.translations import (
    create_check_translation_exists_tool,
    create_create_translation_tool,
    create_create_translations_batch_tool,
    create_get_translations_tool,
)
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)

CONFIRMATION_REQUIRED_ERROR = (
    "confirmation_required: write tools may only run after the user explicitly confirms the preview. "
    "Show the preview and ask for confirmation instead."
)


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "input"
        problems.append(f"{location}: {item.get('msg')}")
    return "Invalid arguments - " + "; ".join(problems)


class ToolsRegistry:
    """Registry of the fixed language/translation tool set."""

    def __init__(self, store: TranslationStore):
        """Initialize tools registry with the backing store."""
        self.store = store
        self._tools: dict[str, ToolDefinition] = {}
        self._register_default_tools()

    def _register_default_tools(self) -> None:
        tools = [
            create_get_languages_tool(self.store),
            create_get_default_language_tool(self.store),
            create_check_translation_exists_tool(self.store),
            create_get_translations_tool(self.store),
            create_create_translations_batch_tool(self.store),
            create_create_translation_tool(self.store),
        ]

        for tool in tools:
            self.register_tool(tool)

    def register_tool(self, tool: ToolDefinition) -> None:
        """Register a new tool in the registry."""
        if tool.name in self._tools:
            raise ValueError(f"Tool {tool.name} is already registered")
        self._tools[tool.name] = tool

    def get_tool_specs(self) -> list[ToolSpec]:
        """Get the schemas advertised to the model, in registration order."""
        return [tool.to_spec() for tool in self._tools.values()]

    def get_tool_names(self) -> list[str]:
        return list(self._tools.keys())

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def is_write_tool(self, name: str) -> bool:
        tool = self._tools.get(name)
        return tool is not None and tool.is_write

    async def invoke(self, call: ToolCall, allow_writes: bool = True) -> ToolResult:
        """Execute a tool call and return its result.

        Never raises for tool-level problems: unknown tools, invalid arguments,
        refused writes and store failures all come back as a failed ToolResult.
        """
        tool = self._tools.get(call.name)
        if tool is None:
            logger.error(f"Unknown tool requested: {call.name}")
            return ToolResult(tool_call_id=call.id, name=call.name, success=False, error=f"Unknown tool {call.name}")

        if tool.is_write and not allow_writes:
            logger.warning(f"Refused write tool {call.name} without confirmation, args: {call.arguments}")
            return ToolResult(tool_call_id=call.id, name=call.name, success=False, error=CONFIRMATION_REQUIRED_ERROR)

        started = time.perf_counter()
        try:
            params = tool.parse_input(call.arguments)
            payload = await tool.handler(params)
        except ValidationError as e:
            elapsed = time.perf_counter() - started
            logger.warning(f"Tool {call.name} rejected arguments {call.arguments} after {elapsed:.3f}s: {e}")
            return ToolResult(
                tool_call_id=call.id, name=call.name, success=False, error=_format_validation_error(e)
            )
        except StoreError as e:
            elapsed = time.perf_counter() - started
            logger.warning(f"Tool {call.name} store error with args {call.arguments} after {elapsed:.3f}s: {e}")
            return ToolResult(tool_call_id=call.id, name=call.name, success=False, error=str(e))
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.error(f"Tool {call.name} failed with args {call.arguments} after {elapsed:.3f}s: {e}", exc_info=True)
            return ToolResult(tool_call_id=call.id, name=call.name, success=False, error=str(e))

        elapsed = time.perf_counter() - started
        success = bool(payload.get("success", True))
        logger.info(f"Tool {call.name} finished in {elapsed:.3f}s (success={success})")
        logger.debug(f"Tool {call.name} args: {call.arguments} result: {str(payload)[:200]}")
        return ToolResult(
            tool_call_id=call.id,
            name=call.name,
            success=success,
            payload=payload,
            error=None if success else payload.get("error"),
        )


_tools_registry: ToolsRegistry | None = None


def get_tools_registry(store: TranslationStore | None = None) -> ToolsRegistry:
    """Get or create tools registry instance."""
    global _tools_registry

    if _tools_registry is None:
        if store is None:
            from i18n_agent.services.translation_store import get_translation_store

            store = get_translation_store()
        _tools_registry = ToolsRegistry(store)

    return _tools_registry
