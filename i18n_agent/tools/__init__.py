"""Tools the translation assistant can call."""

from i18n_agent.tools.registry import ToolsRegistry, get_tools_registry

__all__ = ["ToolsRegistry", "get_tools_registry"]
