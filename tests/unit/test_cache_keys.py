"""Unit tests for audio cache key derivation."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from loopmatch.audio.keys import derive_cache_key, line_identity, text_identity


class TestDeriveCacheKey:
    """Test deterministic cache key derivation."""

    def test_same_inputs_same_key(self) -> None:
        """Test keys are deterministic across calls."""
        first = derive_cache_key("text:abc", "neutral", "slow")
        second = derive_cache_key("text:abc", "neutral", "slow")

        assert first == second
        assert len(first) == 64
        int(first, 16)

    def test_each_input_changes_key(self) -> None:
        """Test content, voice, pace and spacing all affect the key."""
        base = derive_cache_key("text:abc", "neutral", "slow")

        assert derive_cache_key("text:abd", "neutral", "slow") != base
        assert derive_cache_key("text:abc", "confident", "slow") != base
        assert derive_cache_key("text:abc", "neutral", "normal") != base
        assert derive_cache_key("text:abc", "neutral", "slow", spacing_ms=500) != base

    def test_multi_line_order_is_significant(self) -> None:
        """Test reordering the lines of a multi-line render changes the key."""
        forward = derive_cache_key(["line:a", "line:b"], "neutral", "slow", 800)
        backward = derive_cache_key(["line:b", "line:a"], "neutral", "slow", 800)

        assert forward != backward

    def test_sequence_types_equivalent(self) -> None:
        """Test a tuple and a list of the same identities give the same key."""
        assert derive_cache_key(("a", "b"), "neutral", "slow") == derive_cache_key(
            ["a", "b"], "neutral", "slow"
        )

    def test_single_vs_list_differ(self) -> None:
        """Test a single identity is not confused with a one-item list."""
        assert derive_cache_key("a", "neutral", "slow") != derive_cache_key(
            ["a"], "neutral", "slow"
        )

    @pytest.mark.parametrize(
        "content,voice,pace",
        [(None, "neutral", "slow"), ("a", None, "slow"), ("a", "neutral", None)],
    )
    def test_none_inputs_raise(self, content, voice, pace) -> None:
        """Test missing inputs are rejected."""
        with pytest.raises(ValueError, match="must be non-None"):
            derive_cache_key(content, voice, pace)

    def test_empty_inputs_raise(self) -> None:
        """Test empty content, voice or pace is rejected."""
        with pytest.raises(ValueError, match="non-empty"):
            derive_cache_key("", "neutral", "slow")
        with pytest.raises(ValueError, match="non-empty"):
            derive_cache_key([], "neutral", "slow")
        with pytest.raises(ValueError, match="non-empty"):
            derive_cache_key("a", "", "slow")


class TestIdentities:
    """Test content identities fed into cache keys."""

    def test_text_identity_ignores_whitespace_differences(self) -> None:
        """Test identical wording with different spacing shares an identity."""
        assert text_identity("I am  calm ") == text_identity("I am calm")
        assert text_identity("I am calm").startswith("text:")

    def test_text_identity_is_case_sensitive(self) -> None:
        """Test different wording yields a different identity."""
        assert text_identity("I am calm") != text_identity("i am calm")

    def test_line_identity(self) -> None:
        """Test line identities are prefixed ids."""
        assert line_identity("abc123") == "line:abc123"
