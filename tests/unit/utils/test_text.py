"""Unit tests for text helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from patchpoint.utils.text import estimate_tokens, truncate_text


class TestEstimateTokens:
    """Tests for estimate_tokens()."""

    def test_empty_text_is_free(self) -> None:
        assert estimate_tokens("") == 0

    def test_counts_encoded_tokens(self) -> None:
        encoder = MagicMock()
        encoder.encode.return_value = [1, 2, 3]

        with patch("patchpoint.utils.text._encoder", return_value=encoder):
            assert estimate_tokens("def f(): pass") == 3

        encoder.encode.assert_called_once_with("def f(): pass")


class TestTruncateText:
    """Tests for truncate_text()."""

    def test_short_text_unchanged(self) -> None:
        assert truncate_text("abc", 10) == "abc"

    def test_long_text_cut_with_marker(self) -> None:
        assert truncate_text("abcdef", 3, marker="...") == "abc..."
