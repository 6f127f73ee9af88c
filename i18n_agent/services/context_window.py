"""Bounds the conversation history sent to the model."""

from typing import Any

import tiktoken

from i18n_agent.models.llm import Message
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)


class ContextWindow:
    """Keeps the most recent turns of the history and guards message size."""

    def __init__(self, max_history_messages: int = 4, max_message_tokens: int = 2000, tokenizer: Any = None):
        """Initialize the context window.

        Args:
            max_history_messages: Number of prior messages kept (4 is about two turns)
            max_message_tokens: Maximum tokens allowed in the new user message
            tokenizer: Optional encoder with an ``encode`` method; tiktoken is loaded lazily otherwise
        """
        self.max_history_messages = max_history_messages
        self.max_message_tokens = max_message_tokens
        self._tokenizer = tokenizer
        self._tokenizer_loaded = tokenizer is not None

    @property
    def tokenizer(self) -> Any:
        if not self._tokenizer_loaded:
            self._tokenizer_loaded = True
            try:
                # Close approximation for Claude
                self._tokenizer = tiktoken.encoding_for_model("gpt-4")
            except Exception as e:
                logger.warning(f"Tokenizer unavailable, falling back to character estimate: {e}")
                self._tokenizer = None
        return self._tokenizer

    def truncate(self, history: list[Message]) -> list[Message]:
        """Return the most recent ``max_history_messages`` messages, order preserved."""
        if self.max_history_messages <= 0:
            return []
        truncated = history[-self.max_history_messages :]
        if len(truncated) < len(history):
            logger.debug(f"Truncated history from {len(history)} to {len(truncated)} messages")
        return truncated

    def estimate_tokens(self, text: str) -> int:
        try:
            return len(self.tokenizer.encode(text)) if self.tokenizer else len(text) // 4
        except Exception:
            # Fallback: roughly 4 characters per token
            return len(text) // 4

    def validate_message(self, text: str) -> None:
        """Validate that a message doesn't exceed the token limit.

        Raises:
            ValueError: If the message exceeds the token limit
        """
        token_count = self.estimate_tokens(text)
        if token_count > self.max_message_tokens:
            raise ValueError(
                f"Message exceeds token limit: {token_count} tokens > {self.max_message_tokens} limit"
            )
