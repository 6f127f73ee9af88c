"""Translation store interface and implementations.

Languages are keyed by their code and translations by the (key, language_code)
pair. The store owns the data invariants: one row per natural key, exactly one
default language, the default language cannot be deleted, and deleting a
language removes its translations.
"""

import asyncio
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Protocol

from i18n_agent.errors import ConflictError, InvariantError, NotFoundError, StoreValidationError
from i18n_agent.models.i18n import Language, Translation
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)


class TranslationStore(Protocol):
    """Interface for the language/translation persistence layer."""

    async def list_languages(self, active_only: bool = False) -> list[Language]:
        """List languages, default language first, then by code."""
        ...

    async def get_language(self, code: str) -> Language | None: ...

    async def get_default_language(self) -> Language | None: ...

    async def create_language(
        self, code: str, name: str, is_active: bool = True, is_default: bool = False
    ) -> Language: ...

    async def update_language(
        self,
        code: str,
        name: str | None = None,
        is_active: bool | None = None,
        is_default: bool | None = None,
    ) -> Language: ...

    async def delete_language(self, code: str) -> int:
        """Delete a language and its translations, returning how many translations were removed."""
        ...

    async def list_translations(self, key: str | None = None, language_code: str | None = None) -> list[Translation]:
        """List translations in insertion order, optionally filtered."""
        ...

    async def get_translation(self, key: str, language_code: str) -> Translation | None: ...

    async def count_translations(self, key: str) -> int: ...

    async def create_translation(self, key: str, language_code: str, value: str) -> Translation:
        """Insert a translation.

        Raises:
            NotFoundError: If the language does not exist
            ConflictError: If the (key, language_code) pair already exists
        """
        ...

    async def update_translation(self, key: str, language_code: str, value: str) -> Translation: ...

    async def delete_translation(self, key: str, language_code: str) -> None: ...


def validate_language_data(code: str | None, name: str | None) -> None:
    """Validate language fields, raising StoreValidationError listing every problem."""
    errors = []
    if not isinstance(code, str) or not code.strip():
        errors.append("Language code is required")
    if not isinstance(name, str) or not name.strip():
        errors.append("Language name is required")
    if errors:
        raise StoreValidationError(errors)


def validate_translation_data(key: str | None, language_code: str | None, value: str | None) -> None:
    """Validate translation fields, raising StoreValidationError listing every problem."""
    errors = []
    if not isinstance(key, str) or not key.strip():
        errors.append("Translation key is required")
    if not isinstance(language_code, str) or not language_code.strip():
        errors.append("Language code is required")
    if not isinstance(value, str) or not value.strip():
        errors.append("Translation value is required")
    if errors:
        raise StoreValidationError(errors)


class InMemoryTranslationStore:
    """In-memory translation store.

    Mutations run under one lock so that default-language switching and
    check-then-insert of natural keys are atomic.
    """

    def __init__(self, languages: Iterable[Language] | None = None):
        """Initialize the store, optionally seeded with languages."""
        self._languages: dict[str, Language] = {}
        self._translations: dict[tuple[str, str], Translation] = {}
        self._lock = asyncio.Lock()

        for language in languages or []:
            if language.is_default:
                self._clear_default()
            self._languages[language.code] = language

    async def list_languages(self, active_only: bool = False) -> list[Language]:
        languages = [lang for lang in self._languages.values() if lang.is_active or not active_only]
        return sorted(languages, key=lambda lang: (not lang.is_default, lang.code))

    async def get_language(self, code: str) -> Language | None:
        return self._languages.get(code)

    async def get_default_language(self) -> Language | None:
        return next((lang for lang in self._languages.values() if lang.is_default), None)

    async def create_language(
        self, code: str, name: str, is_active: bool = True, is_default: bool = False
    ) -> Language:
        validate_language_data(code, name)
        code = code.strip()

        async with self._lock:
            if code in self._languages:
                raise ConflictError("Language code already exists")

            if is_default:
                self._clear_default()

            language = Language(code=code, name=name.strip(), is_active=is_active, is_default=is_default)
            self._languages[code] = language

        logger.info(f"Created language {code} (default={is_default})")
        return language

    async def update_language(
        self,
        code: str,
        name: str | None = None,
        is_active: bool | None = None,
        is_default: bool | None = None,
    ) -> Language:
        async with self._lock:
            language = self._languages.get(code)
            if language is None:
                raise NotFoundError("Language not found")

            if name is not None:
                validate_language_data(code, name)
            if is_default is False and language.is_default:
                raise InvariantError("Cannot unset the default language; make another language the default instead")

            if name is not None:
                language.name = name.strip()
            if is_active is not None:
                language.is_active = is_active
            if is_default and not language.is_default:
                self._clear_default()
                language.is_default = True

        return language

    async def delete_language(self, code: str) -> int:
        async with self._lock:
            language = self._languages.get(code)
            if language is None:
                raise NotFoundError("Language not found")
            if language.is_default:
                raise InvariantError("Cannot delete default language")

            orphaned = [natural_key for natural_key in self._translations if natural_key[1] == code]
            for natural_key in orphaned:
                del self._translations[natural_key]
            del self._languages[code]

        logger.info(f"Deleted language {code} ({len(orphaned)} translations removed)")
        return len(orphaned)

    async def list_translations(self, key: str | None = None, language_code: str | None = None) -> list[Translation]:
        return [
            translation
            for translation in self._translations.values()
            if (key is None or translation.key == key)
            and (language_code is None or translation.language_code == language_code)
        ]

    async def get_translation(self, key: str, language_code: str) -> Translation | None:
        return self._translations.get((key, language_code))

    async def count_translations(self, key: str) -> int:
        return sum(1 for translation in self._translations.values() if translation.key == key)

    async def create_translation(self, key: str, language_code: str, value: str) -> Translation:
        validate_translation_data(key, language_code, value)
        key = key.strip()

        async with self._lock:
            if language_code not in self._languages:
                raise NotFoundError(f'Language with code "{language_code}" not found')
            if (key, language_code) in self._translations:
                raise ConflictError("Translation with this key and language already exists")

            translation = Translation(key=key, language_code=language_code, value=value)
            self._translations[translation.natural_key] = translation

        logger.debug(f"Created translation {key} [{language_code}]")
        return translation

    async def update_translation(self, key: str, language_code: str, value: str) -> Translation:
        validate_translation_data(key, language_code, value)

        async with self._lock:
            translation = self._translations.get((key, language_code))
            if translation is None:
                raise NotFoundError("Translation not found")
            translation.value = value
            translation.updated_at = datetime.now(UTC)

        return translation

    async def delete_translation(self, key: str, language_code: str) -> None:
        async with self._lock:
            if (key, language_code) not in self._translations:
                raise NotFoundError("Translation not found")
            del self._translations[(key, language_code)]

    def _clear_default(self) -> None:
        for language in self._languages.values():
            language.is_default = False


def seed_languages() -> list[Language]:
    """Default language set, English as the default language."""
    return [
        Language(code="en", name="English", is_default=True),
        Language(code="zh-CN", name="简体中文"),
        Language(code="zh-TW", name="繁體中文"),
        Language(code="ja", name="日本語"),
        Language(code="ko", name="한국어"),
        Language(code="fr", name="Français"),
        Language(code="de", name="Deutsch"),
        Language(code="es", name="Español"),
        Language(code="pt", name="Português"),
        Language(code="ru", name="Русский"),
        Language(code="ar", name="العربية"),
        Language(code="it", name="Italiano"),
        Language(code="nl", name="Nederlands"),
        Language(code="pl", name="Polski"),
        Language(code="tr", name="Türkçe"),
        Language(code="vi", name="Tiếng Việt"),
        Language(code="th", name="ไทย"),
        Language(code="id", name="Bahasa Indonesia"),
        Language(code="ms", name="Bahasa Melayu"),
        Language(code="hi", name="हिन्दी"),
    ]


_translation_store: InMemoryTranslationStore | None = None


def get_translation_store() -> InMemoryTranslationStore:
    """Get or create the process translation store, seeded with the default languages."""
    global _translation_store
    if _translation_store is None:
        _translation_store = InMemoryTranslationStore(seed_languages())
    return _translation_store
