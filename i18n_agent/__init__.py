"""Conversational assistant for managing i18n translations."""

__version__ = "0.1.0"
