"""Tests for the tools registry and the language/translation tools."""

import json

import pytest

from i18n_agent.models.llm import ToolCall
from i18n_agent.tools.base import ToolDefinition
from i18n_agent.tools.languages import EmptyInput
from i18n_agent.tools.registry import CONFIRMATION_REQUIRED_ERROR


def call(name: str, **arguments) -> ToolCall:
    return ToolCall(id=f"call_{name}", name=name, arguments=arguments)


LOADING_BATCH = [
    {"languageCode": "en", "value": "Loading"},
    {"languageCode": "zh-CN", "value": "加载中"},
    {"languageCode": "ja", "value": "読み込み中"},
    {"languageCode": "fr", "value": "Chargement"},
    {"languageCode": "de", "value": "Wird geladen"},
]


class TestRegistry:
    """Tests for tool registration and schemas."""

    def test_fixed_tool_set(self, registry):
        """Test that the registry exposes the six tools in a stable order."""
        assert registry.get_tool_names() == [
            "get_languages",
            "get_default_language",
            "check_translation_exists",
            "get_translations",
            "create_translations_batch",
            "create_translation",
        ]

    def test_write_tools_are_classified(self, registry):
        """Test that only the creation tools are write tools."""
        writes = [name for name in registry.get_tool_names() if registry.is_write_tool(name)]

        assert writes == ["create_translations_batch", "create_translation"]
        assert not registry.is_write_tool("unknown_tool")

    def test_specs_carry_key_pattern(self, registry):
        """Test that only the creation tools advertise the namespaced key pattern."""
        specs = {spec.name: spec for spec in registry.get_tool_specs()}

        assert "pattern" in specs["create_translation"].input_schema["properties"]["key"]
        assert "pattern" in specs["create_translations_batch"].input_schema["properties"]["key"]
        assert "pattern" not in specs["check_translation_exists"].input_schema["properties"]["key"]
        assert specs["create_translations_batch"].input_schema["required"] == ["key", "translations"]

    def test_duplicate_registration_rejected(self, registry):
        """Test that tool names are unique."""
        async def handler(params):
            return {}

        with pytest.raises(ValueError, match="already registered"):
            registry.register_tool(ToolDefinition("get_languages", "dup", EmptyInput, handler))


class TestReadTools:
    """Tests for the lookup tools."""

    @pytest.mark.asyncio
    async def test_get_languages_active_only_by_default(self, registry):
        """Test that inactive languages are hidden unless asked for."""
        result = await registry.invoke(call("get_languages"))

        assert result.success
        codes = [language["code"] for language in result.payload["languages"]]
        assert codes[0] == "en"
        assert "xx" not in codes

        result = await registry.invoke(call("get_languages", activeOnly=False))
        assert len(result.payload["languages"]) == 6

    @pytest.mark.asyncio
    async def test_get_default_language(self, registry):
        """Test that the default language is reported with code and name."""
        result = await registry.invoke(call("get_default_language"))

        assert result.payload == {"success": True, "language": {"code": "en", "name": "English"}}

    @pytest.mark.asyncio
    async def test_check_translation_exists(self, registry, store):
        """Test existence checks before and after creating a key."""
        result = await registry.invoke(call("check_translation_exists", key="common.loading"))
        assert result.payload == {"success": True, "exists": False, "count": 0}

        await store.create_translation("common.loading", "en", "Loading")
        result = await registry.invoke(call("check_translation_exists", key="common.loading"))
        assert result.payload == {"success": True, "exists": True, "count": 1}

    @pytest.mark.asyncio
    async def test_get_translations_includes_language_names(self, registry, store):
        """Test that translations are returned with their language names."""
        await store.create_translation("common.welcome", "en", "Welcome")
        await store.create_translation("common.welcome", "ja", "ようこそ")

        result = await registry.invoke(call("get_translations", key="common.welcome"))

        assert result.payload["count"] == 2
        assert result.payload["translations"][1] == {"language": "日本語", "code": "ja", "value": "ようこそ"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["welcome", "Common.Title"])
    async def test_lookup_finds_any_stored_key(self, registry, store, key):
        """Test that lookups accept every key the store accepts, namespaced or not."""
        await store.create_translation(key, "en", "Welcome")

        exists = await registry.invoke(call("check_translation_exists", key=key))
        translations = await registry.invoke(call("get_translations", key=key))

        assert exists.payload == {"success": True, "exists": True, "count": 1}
        assert translations.success
        assert translations.payload["translations"] == [{"language": "English", "code": "en", "value": "Welcome"}]

    @pytest.mark.asyncio
    async def test_blank_lookup_key_rejected(self, registry):
        result = await registry.invoke(call("get_translations", key=""))

        assert not result.success
        assert result.error.startswith("Invalid arguments - key:")

    @pytest.mark.asyncio
    async def test_reads_allowed_without_confirmation(self, registry):
        """Test that lookups never need confirmation."""
        result = await registry.invoke(call("get_languages"), allow_writes=False)

        assert result.success


class TestWriteTools:
    """Tests for the creation tools."""

    @pytest.mark.asyncio
    async def test_batch_creates_every_language(self, registry, store):
        """Test that a batch inserts one translation per language."""
        batch = call("create_translations_batch", key="common.loading", translations=LOADING_BATCH)
        result = await registry.invoke(batch)

        assert result.success
        assert result.payload["created"] == 5
        assert "errors" not in result.payload
        assert await store.count_translations("common.loading") == 5

    @pytest.mark.asyncio
    async def test_batch_reports_existing_entries(self, registry, store):
        """Test that existing entries fail on their own while the rest are created."""
        await store.create_translation("common.loading", "fr", "Chargement en cours")

        batch = call("create_translations_batch", key="common.loading", translations=LOADING_BATCH)
        result = await registry.invoke(batch)

        assert not result.success
        assert result.payload["created"] == 4
        assert result.payload["errors"] == [{"languageCode": "fr", "error": "Already exists"}]
        assert (await store.get_translation("common.loading", "fr")).value == "Chargement en cours"
        assert json.loads(result.to_content())["created"] == 4

    @pytest.mark.asyncio
    async def test_batch_reports_unknown_language(self, registry):
        """Test that a language missing from the store is reported per entry."""
        translations = [{"languageCode": "en", "value": "Loading"}, {"languageCode": "tlh", "value": "loS"}]

        batch = call("create_translations_batch", key="common.loading", translations=translations)
        result = await registry.invoke(batch)

        assert result.payload["created"] == 1
        assert result.payload["errors"] == [{"languageCode": "tlh", "error": 'Language with code "tlh" not found'}]

    @pytest.mark.asyncio
    async def test_create_single_translation(self, registry):
        """Test creating one translation."""
        result = await registry.invoke(
            call("create_translation", key="button.submit", languageCode="de", value="Absenden")
        )

        assert result.payload == {
            "success": True,
            "translation": {"key": "button.submit", "value": "Absenden", "languageCode": "de"},
        }

    @pytest.mark.asyncio
    async def test_create_single_duplicate_is_a_tool_error(self, registry, store):
        """Test that store conflicts come back as failed results."""
        await store.create_translation("button.submit", "de", "Absenden")

        result = await registry.invoke(
            call("create_translation", key="button.submit", languageCode="de", value="Senden")
        )

        assert not result.success
        assert result.error == "Translation with this key and language already exists"
        assert json.loads(result.to_content()) == {"success": False, "error": result.error}

    @pytest.mark.asyncio
    async def test_write_refused_without_confirmation(self, registry, store):
        """Test that write tools do nothing until writes are allowed."""
        result = await registry.invoke(
            call("create_translations_batch", key="common.loading", translations=LOADING_BATCH), allow_writes=False
        )

        assert not result.success
        assert result.error == CONFIRMATION_REQUIRED_ERROR
        assert await store.count_translations("common.loading") == 0


class TestInvalidCalls:
    """Tests for calls the registry cannot run."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry):
        """Test that an unknown tool name is reported, not raised."""
        result = await registry.invoke(call("delete_everything"))

        assert not result.success
        assert result.error == "Unknown tool delete_everything"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["Loading", "{key}", "common", "common..loading"])
    async def test_malformed_key_rejected(self, registry, key):
        """Test that created keys must be namespaced dot-strings."""
        result = await registry.invoke(call("create_translation", key=key, languageCode="en", value="Loading"))

        assert not result.success
        assert result.error.startswith("Invalid arguments - key:")

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, registry):
        """Test that a batch needs at least one translation."""
        result = await registry.invoke(call("create_translations_batch", key="common.loading", translations=[]))

        assert not result.success
        assert "translations" in result.error

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_tool_error(self, registry, store, monkeypatch):
        """Test that unexpected handler failures are reported as failed results."""

        async def broken(active_only=False):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(store, "list_languages", broken)

        result = await registry.invoke(call("get_languages"))

        assert not result.success
        assert result.error == "database unavailable"
