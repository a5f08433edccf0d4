"""
Token counting for the LLM classifier backend.

Source files are sent to the model verbatim inside the prompt. Very large files
would blow past the model's context window, so code is cut down to a token
budget before the request is made. This module provides the tiktoken-backed
production counter and a configurable test double behind a common protocol.
"""

from typing import Callable, Protocol
import tiktoken


class TokenCounter(Protocol):
    """Protocol for counting and truncating tokens in text."""

    def count(self, text: str | None) -> int:
        """Count tokens in the given text."""

    def truncate(self, text: str, max_tokens: int) -> str:
        """Return the longest prefix of `text` that fits in `max_tokens`."""


class TiktokenCounter:
    """
    Production implementation of TokenCounter using tiktoken.

    Uses tiktoken to count tokens for a specific model. Falls back to
    cl100k_base encoding if the model name is not recognized, which is the
    case for most non-OpenAI models reachable through litellm.
    """

    def __init__(self, model_name: str = "gpt-4o"):
        try:
            self.encoder = tiktoken.encoding_for_model(model_name)
        except KeyError:
            self.encoder = tiktoken.get_encoding("cl100k_base")

    def count(self, text: str | None) -> int:
        if not text:
            return 0
        return len(self.encoder.encode(text))

    def truncate(self, text: str, max_tokens: int) -> str:
        tokens = self.encoder.encode(text)
        if len(tokens) <= max_tokens:
            return text
        return self.encoder.decode(tokens[:max_tokens])


class NoOpTokenCounter:
    """
    No-op implementation of TokenCounter for testing.

    Returns configurable token counts, allowing tests to control token counting
    behavior without requiring tiktoken encodings to be available.
    """

    def __init__(
        self,
        return_value: int | None = None,
        count_fn: Callable[[str | None], int] | None = None,
    ):
        self.return_value = return_value
        self.count_fn = count_fn
        self.truncate_calls: list[int] = []

    def count(self, text: str | None) -> int:
        if self.return_value is not None:
            return self.return_value
        if self.count_fn is not None:
            return self.count_fn(text)
        return 0

    def truncate(self, text: str, max_tokens: int) -> str:
        self.truncate_calls.append(max_tokens)
        return text
