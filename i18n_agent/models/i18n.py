"""Language and translation business models."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class Language:
    """A language, identified by its code."""

    code: str
    name: str
    is_active: bool = True
    is_default: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "isDefault": self.is_default,
            "isActive": self.is_active,
        }


@dataclass
class Translation:
    """A translated value, unique per (key, language_code)."""

    key: str
    language_code: str
    value: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def natural_key(self) -> tuple[str, str]:
        return (self.key, self.language_code)

    def as_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "languageCode": self.language_code,
        }
