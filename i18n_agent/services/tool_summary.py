"""Plain-text summaries of tool results.

Used when the model returns an empty completion after tools already ran, so
the user still gets an answer built from the structured results.
"""

from typing import Any

from i18n_agent.models.llm import ToolCall, ToolResult


def _summarize_languages(payload: dict[str, Any]) -> str:
    lines = [f"Available languages ({len(payload.get('languages', []))}):"]
    for language in payload.get("languages", []):
        marker = " - default" if language.get("isDefault") else ""
        lines.append(f"- {language.get('name')} ({language.get('code')}){marker}")
    return "\n".join(lines)


def _summarize_translations(key: str, payload: dict[str, Any]) -> str:
    translations = payload.get("translations", [])
    if not translations:
        return f"No translations found for {key}."
    lines = [f"Translations of {key}:"]
    for item in translations:
        lines.append(f"- {item.get('language')} ({item.get('code')}): {item.get('value')}")
    return "\n".join(lines)


def _summarize_batch(key: str, payload: dict[str, Any]) -> str:
    lines = [f"Created {payload.get('created', 0)} translation(s) for {key}."]
    for error in payload.get("errors") or []:
        lines.append(f"- {error.get('languageCode')}: {error.get('error')}")
    return "\n".join(lines)


def summarize_tool_result(call: ToolCall, result: ToolResult) -> str:
    """Describe one tool result in a sentence or a short list."""
    key = str(call.arguments.get("key", ""))
    payload = result.payload or {}

    if call.name == "create_translations_batch" and "created" in payload:
        return _summarize_batch(key, payload)
    if not result.success:
        return f"{call.name} failed: {result.error or 'unknown error'}"

    match call.name:
        case "get_languages":
            return _summarize_languages(payload)
        case "get_default_language":
            language = payload.get("language", {})
            return f"The default language is {language.get('name')} ({language.get('code')})."
        case "check_translation_exists":
            if payload.get("exists"):
                return f"The key {key} exists with {payload.get('count', 0)} translation(s)."
            return f"The key {key} does not exist yet."
        case "get_translations":
            return _summarize_translations(key, payload)
        case "create_translation":
            translation = payload.get("translation", {})
            return (
                f"Created translation {translation.get('key')} "
                f"[{translation.get('languageCode')}]: {translation.get('value')}"
            )
    return f"{call.name} completed."


def summarize_tool_results(executed: list[tuple[ToolCall, ToolResult]]) -> str:
    return "\n\n".join(summarize_tool_result(call, result) for call, result in executed)
