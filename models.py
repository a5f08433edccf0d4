"""
Type definitions and data models used across the VulnLens CLI application.

This module contains shared type definitions including enums and TypedDict
structures that are used throughout the codebase for type safety and consistency.
"""

from enum import StrEnum
from typing import TypedDict


class SupportedLanguage(StrEnum):
    """
    Enumeration of language tags understood by the vulnerability classifier.

    The enum values are the exact tags sent in the `language` field of a
    classifier request, and are used as keys in LANGUAGE_BY_EXTENSION and in
    per-language classifier endpoint overrides.
    """

    PHP = "php"
    JS = "js"


class ClassifierBackend(StrEnum):
    """Which classifier implementation the CLI talks to."""

    API = "api"
    LLM = "llm"


class SelectionHeuristics(TypedDict):
    """
    Type definition for the file selection heuristics.

    This TypedDict defines the configuration consumed by the file selector when
    narrowing a repository listing down to the files worth analyzing.

    Attributes:
        supported_extensions: A frozen set of file extensions (e.g., ".php", ".js")
            that a file must end with to be considered at all.
        excluded_path_substrings: A frozen set of substrings (e.g., "node_modules",
            "vendor") that disqualify any path containing them.
        priority_path_substrings: A tuple of substrings (e.g., "index", "login")
            that move a file into the high-priority tier.
        max_candidates: Upper bound on the number of files analyzed per scan.
    """

    supported_extensions: frozenset[str]
    excluded_path_substrings: frozenset[str]
    priority_path_substrings: tuple[str, ...]
    max_candidates: int
