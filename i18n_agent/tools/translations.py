"""Translation lookup and creation tools."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from i18n_agent.errors import ConflictError
from i18n_agent.services.translation_store import TranslationStore
from i18n_agent.tools.base import ToolDefinition, lookup_key_field, translation_key_field
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)


class TranslationKeyInput(BaseModel):
    """Input schema for tools looking up a single translation key."""

    key: str = lookup_key_field()


class CreateTranslationInput(BaseModel):
    """Input schema for creating a single translation."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = translation_key_field()
    language_code: str = Field(
        ...,
        alias="languageCode",
        min_length=1,
        max_length=20,
        description="Language code, e.g. en, zh-CN, ja",
    )
    value: str = Field(..., min_length=1, description="Translated text")


class BatchTranslationEntry(BaseModel):
    """One language/value pair of a batch creation."""

    model_config = ConfigDict(populate_by_name=True)

    language_code: str = Field(..., alias="languageCode", min_length=1, max_length=20)
    value: str = Field(..., min_length=1)


class CreateTranslationsBatchInput(BaseModel):
    """Input schema for creating one key across several languages."""

    key: str = translation_key_field()
    translations: list[BatchTranslationEntry] = Field(
        ...,
        min_length=1,
        description="Translations to create, each with a language code and the translated text",
    )


def create_check_translation_exists_tool(store: TranslationStore) -> ToolDefinition:
    async def check_translation_exists(params: TranslationKeyInput) -> dict:
        count = await store.count_translations(params.key)
        return {"success": True, "exists": count > 0, "count": count}

    return ToolDefinition(
        name="check_translation_exists",
        description=(
            "Check whether a translation key already exists. "
            "The key must be a concrete value such as common.loading, never a placeholder."
        ),
        input_schema_class=TranslationKeyInput,
        handler=check_translation_exists,
    )


def create_get_translations_tool(store: TranslationStore) -> ToolDefinition:
    async def get_translations(params: TranslationKeyInput) -> dict:
        translations = await store.list_translations(key=params.key)
        items = []
        for translation in translations:
            language = await store.get_language(translation.language_code)
            items.append(
                {
                    "language": language.name if language else translation.language_code,
                    "code": translation.language_code,
                    "value": translation.value,
                }
            )
        return {"success": True, "count": len(items), "translations": items}

    return ToolDefinition(
        name="get_translations",
        description="Get the existing translations of a key in every language it has been translated to.",
        input_schema_class=TranslationKeyInput,
        handler=get_translations,
    )


def create_create_translation_tool(store: TranslationStore) -> ToolDefinition:
    async def create_translation(params: CreateTranslationInput) -> dict:
        translation = await store.create_translation(params.key, params.language_code, params.value)
        return {"success": True, "translation": translation.as_dict()}

    return ToolDefinition(
        name="create_translation",
        description=(
            "Create one translation for a key in one language. "
            "Only call this after the user has explicitly confirmed the preview."
        ),
        input_schema_class=CreateTranslationInput,
        handler=create_translation,
        kind="write",
    )


def create_create_translations_batch_tool(store: TranslationStore) -> ToolDefinition:
    async def create_translations_batch(params: CreateTranslationsBatchInput) -> dict:
        results: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []

        # Each language is attempted on its own so one conflict does not block the rest
        for entry in params.translations:
            try:
                translation = await store.create_translation(params.key, entry.language_code, entry.value)
            except ConflictError:
                errors.append({"languageCode": entry.language_code, "error": "Already exists"})
                continue
            except Exception as e:
                logger.warning(f"Batch item {params.key} [{entry.language_code}] failed: {e}")
                errors.append({"languageCode": entry.language_code, "error": str(e)})
                continue

            language = await store.get_language(translation.language_code)
            results.append(
                {
                    "success": True,
                    "languageCode": translation.language_code,
                    "language": language.name if language else translation.language_code,
                    "value": translation.value,
                }
            )

        payload: dict[str, Any] = {
            "success": not errors,
            "created": len(results),
            "count": len(results),
            "results": results,
        }
        if errors:
            payload["errors"] = errors
        return payload

    return ToolDefinition(
        name="create_translations_batch",
        description=(
            "Create translations of one key for several languages at once. "
            "Each language is inserted independently; existing entries are reported as errors, never overwritten. "
            "Only call this after the user has explicitly confirmed the preview."
        ),
        input_schema_class=CreateTranslationsBatchInput,
        handler=create_translations_batch,
        kind="write",
    )
