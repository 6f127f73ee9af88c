"""Tests for the confirmation sentinel protocol."""

import pytest

from i18n_agent.services.confirmation import (
    CONFIRM_SENTINEL,
    is_cancellation,
    is_confirmation,
    split_confirmation,
    writes_confirmed,
)


class TestSplitConfirmation:
    """Tests for separating display text from the confirmation flag."""

    def test_preview_with_sentinel(self):
        """Test that the sentinel is removed and reported."""
        text, required = split_confirmation(f"Key: common.loading\n- English (en): Loading\n{CONFIRM_SENTINEL}\n")

        assert required
        assert text == "Key: common.loading\n- English (en): Loading"

    def test_plain_answer(self):
        """Test that text without the sentinel passes through."""
        assert split_confirmation("There are 5 languages.  ") == ("There are 5 languages.", False)

    def test_every_occurrence_removed(self):
        """Test that repeated sentinels are all stripped."""
        text, required = split_confirmation(f"{CONFIRM_SENTINEL}Preview{CONFIRM_SENTINEL}")

        assert required
        assert text == "Preview"


class TestConfirmWords:
    """Tests for recognizing confirm and cancel answers."""

    @pytest.mark.parametrize("utterance", ["confirm", "Confirm!", "  yes ", "CONFIRMED.", "确认"])
    def test_confirmations(self, utterance):
        assert is_confirmation(utterance)
        assert not is_cancellation(utterance)

    @pytest.mark.parametrize("utterance", ["cancel", "Cancel.", "取消", " CANCEL! "])
    def test_cancellations(self, utterance):
        assert is_cancellation(utterance)
        assert not is_confirmation(utterance)

    @pytest.mark.parametrize("utterance", ["yes please add it", "add Loading", "no", ""])
    def test_other_utterances(self, utterance):
        assert not is_confirmation(utterance)
        assert not is_cancellation(utterance)


class TestWritesConfirmed:
    """Tests for deciding whether a turn may write."""

    @pytest.mark.parametrize(
        ("utterance", "confirmed", "expected"),
        [
            ("confirm", None, True),
            ("add Loading", None, False),
            ("go ahead", True, True),
            ("confirm", False, False),
            ("cancel", True, False),
            ("cancel", None, False),
        ],
    )
    def test_decision(self, utterance, confirmed, expected):
        assert writes_confirmed(utterance, confirmed) is expected
