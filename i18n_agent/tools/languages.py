"""Read-only language tools."""

from pydantic import BaseModel, ConfigDict, Field

from i18n_agent.services.translation_store import TranslationStore
from i18n_agent.tools.base import ToolDefinition


class GetLanguagesInput(BaseModel):
    """Input schema for the language listing tool."""

    model_config = ConfigDict(populate_by_name=True)

    active_only: bool = Field(
        default=True,
        alias="activeOnly",
        description="Only return active languages (default true)",
    )


class EmptyInput(BaseModel):
    """Empty input schema for tools that don't require parameters."""


def create_get_languages_tool(store: TranslationStore) -> ToolDefinition:
    async def get_languages(params: GetLanguagesInput) -> dict:
        languages = await store.list_languages(active_only=params.active_only)
        return {"success": True, "languages": [language.as_dict() for language in languages]}

    return ToolDefinition(
        name="get_languages",
        description=(
            "List the languages configured in the system with their code, name, "
            "whether they are active and which one is the default. "
            "Call this before preparing translations so every active language is covered."
        ),
        input_schema_class=GetLanguagesInput,
        handler=get_languages,
    )


def create_get_default_language_tool(store: TranslationStore) -> ToolDefinition:
    async def get_default_language(params: EmptyInput) -> dict:
        language = await store.get_default_language()
        if language is None:
            return {"success": False, "error": "No default language found"}
        return {"success": True, "language": {"code": language.code, "name": language.name}}

    return ToolDefinition(
        name="get_default_language",
        description="Get the default language of the system (code and name).",
        input_schema_class=EmptyInput,
        handler=get_default_language,
    )
