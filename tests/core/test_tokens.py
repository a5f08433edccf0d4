"""
Comprehensive tests for the tokens module using pytest.

Tests cover:
- TiktokenCounter: initialization with different models, fallback behavior,
  token counting and truncation
- NoOpTokenCounter: configurable counts and truncation tracking
"""

import pytest

from core.tokens import NoOpTokenCounter, TiktokenCounter


# ============================================================================
# Tests for TiktokenCounter
# ============================================================================


@pytest.mark.mock
def test_tiktoken_counter_uses_model_encoding(mocker):
    """TiktokenCounter should ask tiktoken for the model's encoding."""
    encoding_for_model = mocker.patch("core.tokens.tiktoken.encoding_for_model")

    counter = TiktokenCounter("gpt-4o")

    encoding_for_model.assert_called_once_with("gpt-4o")
    assert counter.encoder is encoding_for_model.return_value


@pytest.mark.mock
def test_tiktoken_counter_falls_back_to_cl100k(mocker):
    """Unknown model names (e.g. gemini/...) should use cl100k_base."""
    mocker.patch(
        "core.tokens.tiktoken.encoding_for_model", side_effect=KeyError("unknown")
    )
    get_encoding = mocker.patch("core.tokens.tiktoken.get_encoding")

    counter = TiktokenCounter("gemini/gemini-2.5-flash")

    get_encoding.assert_called_once_with("cl100k_base")
    assert counter.encoder is get_encoding.return_value


@pytest.mark.mock
def test_tiktoken_counter_count(mocker):
    encoder = mocker.MagicMock()
    encoder.encode.return_value = [1, 2, 3]
    mocker.patch("core.tokens.tiktoken.encoding_for_model", return_value=encoder)

    assert TiktokenCounter().count("some text") == 3


@pytest.mark.mock
@pytest.mark.parametrize("text", [None, ""])
def test_tiktoken_counter_count_empty(mocker, text):
    encoder = mocker.MagicMock()
    mocker.patch("core.tokens.tiktoken.encoding_for_model", return_value=encoder)

    assert TiktokenCounter().count(text) == 0
    encoder.encode.assert_not_called()


@pytest.mark.mock
def test_tiktoken_counter_truncate_short_text_unchanged(mocker):
    encoder = mocker.MagicMock()
    encoder.encode.return_value = [1, 2]
    mocker.patch("core.tokens.tiktoken.encoding_for_model", return_value=encoder)

    assert TiktokenCounter().truncate("ab", 5) == "ab"
    encoder.decode.assert_not_called()


@pytest.mark.mock
def test_tiktoken_counter_truncate_long_text(mocker):
    encoder = mocker.MagicMock()
    encoder.encode.return_value = [1, 2, 3, 4, 5]
    encoder.decode.return_value = "abc"
    mocker.patch("core.tokens.tiktoken.encoding_for_model", return_value=encoder)

    assert TiktokenCounter().truncate("abcde", 3) == "abc"
    encoder.decode.assert_called_once_with([1, 2, 3])


# ============================================================================
# Tests for NoOpTokenCounter
# ============================================================================


@pytest.mark.unit
def test_noop_counter_return_value():
    assert NoOpTokenCounter(return_value=42).count("anything") == 42


@pytest.mark.unit
def test_noop_counter_count_fn():
    counter = NoOpTokenCounter(count_fn=lambda text: len(text or ""))

    assert counter.count("abcd") == 4


@pytest.mark.unit
def test_noop_counter_defaults_to_zero():
    assert NoOpTokenCounter().count("abcd") == 0


@pytest.mark.unit
def test_noop_counter_truncate_tracks_calls():
    counter = NoOpTokenCounter()

    assert counter.truncate("text", 10) == "text"
    assert counter.truncate_calls == [10]
