"""Confirmation protocol between the assistant and its caller.

Before any write the assistant shows a preview ending with CONFIRM_SENTINEL.
The caller strips the sentinel for display and renders confirm/cancel
controls; the user's answer comes back as the next user message.
"""

import re

CONFIRM_SENTINEL = "[CONFIRM_REQUIRED]"

CONFIRM_WORDS = frozenset({"confirm", "confirmed", "yes", "确认"})
CANCEL_WORDS = frozenset({"cancel", "取消"})

_TRAILING_PUNCTUATION = ".!。！"


def split_confirmation(text: str) -> tuple[str, bool]:
    """Split a response into display text and whether it asks for confirmation.

    Returns:
        The text with every sentinel removed and trailing whitespace trimmed,
        and True iff the raw text contained the sentinel
    """
    requires_confirmation = CONFIRM_SENTINEL in text
    return text.replace(CONFIRM_SENTINEL, "").rstrip(), requires_confirmation


def _normalize(utterance: str) -> str:
    return re.sub(r"\s+", " ", utterance).strip().strip(_TRAILING_PUNCTUATION).strip().lower()


def is_confirmation(utterance: str) -> bool:
    return _normalize(utterance) in CONFIRM_WORDS


def is_cancellation(utterance: str) -> bool:
    return _normalize(utterance) in CANCEL_WORDS


def writes_confirmed(utterance: str, confirmed: bool | None = None) -> bool:
    """Whether the current request carries the user's approval for a write.

    An explicit caller assertion wins; otherwise the utterance itself must be a
    confirmation word. A cancellation never confirms.
    """
    if is_cancellation(utterance):
        return False
    if confirmed is not None:
        return confirmed
    return is_confirmation(utterance)
