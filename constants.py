"""
Application-wide constants and configuration mappings.

This module defines the heuristics and fixed configuration data used throughout
the VulnLens CLI application. It includes the file selection heuristics, the
extension-to-language mapping used by the classifier client, remote API
defaults, and the prompt used by the LLM classifier backend.
"""

from pathlib import Path
from typing import Final, Mapping
from models import SelectionHeuristics, SupportedLanguage


# Heuristics for narrowing a repository tree down to the files worth scanning.
# Extensions are matched against the path suffix, excluded and priority
# substrings are matched anywhere in the repo-relative path. Priority substrings
# point at likely attack surface: entry points, login handlers and PHP code.
SELECTION_HEURISTICS: Final[SelectionHeuristics] = {
    "supported_extensions": frozenset(
        {".js", ".jsx", ".ts", ".tsx", ".php", ".html", ".vue", ".py"}
    ),
    "excluded_path_substrings": frozenset(
        {
            "node_modules",
            "vendor",
            "test",
            "dist",
        }
    ),
    "priority_path_substrings": ("index", "login", "php"),
    "max_candidates": 50,
}

# Maps a lowercase file extension to the language tag the classifier expects.
# Extensions missing from this mapping are never sent to the classifier.
LANGUAGE_BY_EXTENSION: Final[Mapping[str, SupportedLanguage]] = {
    ".php": SupportedLanguage.PHP,
    ".js": SupportedLanguage.JS,
    ".jsx": SupportedLanguage.JS,
    ".ts": SupportedLanguage.JS,
    ".tsx": SupportedLanguage.JS,
}

# Virtual filenames used for quick scans of pasted code (stdin).
QUICK_SCAN_FILENAMES: Final[Mapping[SupportedLanguage, str]] = {
    SupportedLanguage.PHP: "code.php",
    SupportedLanguage.JS: "code.js",
}

GITHUB_API_BASE: Final[str] = "https://api.github.com"
GITHUB_ACCEPT: Final[str] = "application/vnd.github.v3+json"

# Wall-clock limit for the repository metadata and tree listing calls.
SOURCE_TIMEOUT_SECONDS: Final[float] = 30.0
CLASSIFIER_TIMEOUT_SECONDS: Final[float] = 60.0

DEFAULT_CLASSIFIER_URL: Final[str] = "http://localhost:8080/api/v1"

# History store limits
HISTORY_TABLE: Final[str] = "scans"
HISTORY_LIST_LIMIT: Final[int] = 50
HISTORY_SNIPPET_LIMIT: Final[int] = 1000

CONFIG_DIR: Final[Path] = Path.home() / ".vulnlens"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "settings.json"

DEFAULT_LLM_MODEL: Final[str] = "gemini/gemini-2.5-flash"
LLM_MAX_INPUT_TOKENS: Final[int] = 100_000

SAMPLE_VULNERABILITY_PROMPT: Final[str] = """
You are an expert Cyber Security Engineer specialized in detecting XSS (Cross-Site Scripting) and code injection vulnerabilities in JavaScript and PHP applications.
Analyze the provided source code for security vulnerabilities.
Focus primarily on:
1. Reflected XSS (e.g., echoing user input without sanitization in PHP or JS).
2. Stored XSS.
3. DOM-based XSS (e.g., using innerHTML with user input).
4. Code Injection (e.g., eval(), system(), exec()).

Return a JSON object strictly following this schema:
{
  "vulnerabilities": [
    {
      "type": "String (e.g., Reflected XSS, DOM XSS)",
      "severity": "String (Critical, High, Medium, Low)",
      "lineNumber": "Number",
      "description": "String (Short explanation of why it is vulnerable)",
      "codeSnippet": "String (The specific line of code)",
      "suggestion": "String (Specific code fix to sanitize the input)"
    }
  ]
}

If no vulnerabilities are found, return { "vulnerabilities": [] }.
"""
