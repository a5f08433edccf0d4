"""
Vulnerability classifier clients.

A classifier takes the source of one file and returns the findings for it. Two
backends implement the same `VulnerabilityClassifier` protocol:

- `HttpClassifierClient` talks to the CodeBERT inference API
  (`POST {base}/scan`, `GET {base}/health`).
- `LlmClassifierClient` asks a chat model through litellm for the same JSON shape.

Both are fail-open: a transport error, a non-success status or a malformed body
is reported as a warning and turned into "no findings" so that a single file (or
a classifier outage) never aborts a repository scan. Failed paths are kept in
`failed_paths` so callers can tell the user how many files were not analyzed.
"""

import json
from collections.abc import Awaitable, Callable, Mapping
from pathlib import PurePosixPath
from typing import Any, Protocol

import httpx
from litellm import acompletion

from constants import (
    CLASSIFIER_TIMEOUT_SECONDS,
    DEFAULT_CLASSIFIER_URL,
    DEFAULT_LLM_MODEL,
    LANGUAGE_BY_EXTENSION,
    LLM_MAX_INPUT_TOKENS,
    SAMPLE_VULNERABILITY_PROMPT,
)
from core.exceptions import ClassifierError, UnsupportedFileError
from core.models import Finding, Severity
from core.tokens import TiktokenCounter, TokenCounter
from models import SupportedLanguage
from utils import debug, warn


class VulnerabilityClassifier(Protocol):
    """Protocol for anything that can analyze one file's code."""

    async def analyze(self, code: str, file_path: str) -> list[Finding]:
        """
        Analyze `code` (the content of `file_path`) for vulnerabilities.

        Implementations never raise: failures yield an empty list.
        """


def language_for_path(file_path: str) -> SupportedLanguage | None:
    """Map a file's extension (case-insensitive) to a classifier language tag."""
    # rpartition rather than Path.suffix so that dotfiles like ".js" still map
    _, dot, extension = PurePosixPath(file_path).name.rpartition(".")
    if not dot:
        return None
    return LANGUAGE_BY_EXTENSION.get(f".{extension.lower()}")


def resolve_endpoint(
    language: SupportedLanguage,
    default_url: str = DEFAULT_CLASSIFIER_URL,
    overrides: Mapping[str, str] | None = None,
) -> str:
    """
    Resolve the scan endpoint for a language tag.

    Endpoint resolution is a pure function of the language tag: a per-language
    base URL override wins, otherwise the default base URL is used.
    """
    base = (overrides or {}).get(str(language)) or default_url
    return f"{base.rstrip('/')}/scan"


def normalize_severity(value: Any) -> Severity:
    """Case-fold a raw severity label; anything unrecognized becomes Info."""
    if not isinstance(value, str):
        return Severity.INFO
    folded = value.strip().casefold()
    for severity in Severity:
        if severity.value.casefold() == folded:
            return severity
    return Severity.INFO


def normalize_line_number(value: Any) -> int:
    try:
        line = int(value)
    except (TypeError, ValueError):
        return 1
    return line if line > 0 else 1


def normalize_finding(raw: Mapping[str, Any]) -> Finding:
    """
    Convert one raw classifier finding into a Finding.

    Accepts both the API's snake_case keys (`line_number`, `code_snippet`) and
    the camelCase keys produced by the LLM prompt (`lineNumber`, `codeSnippet`).
    """
    line = raw.get("line_number", raw.get("lineNumber"))
    snippet = raw.get("code_snippet", raw.get("codeSnippet"))
    return Finding(
        category=str(raw.get("type") or "Unknown"),
        severity=normalize_severity(raw.get("severity")),
        line_number=normalize_line_number(line),
        description=str(raw.get("description") or ""),
        evidence_snippet=str(snippet or ""),
        remediation=raw.get("suggestion") or None,
    )


def parse_findings(payload: Any, file_path: str | None = None) -> list[Finding]:
    """
    Normalize a classifier response body.

    Raises:
        ClassifierError: If the body does not have a `vulnerabilities` list of
            objects.
    """
    if not isinstance(payload, dict):
        raise ClassifierError("Classifier response is not a JSON object", file_path)

    raw_findings = payload.get("vulnerabilities")
    if raw_findings is None:
        raw_findings = []
    if not isinstance(raw_findings, list) or not all(
        isinstance(item, dict) for item in raw_findings
    ):
        raise ClassifierError("Malformed 'vulnerabilities' in response", file_path)

    return [normalize_finding(item) for item in raw_findings]


class HttpClassifierClient:
    """
    Client for the CodeBERT vulnerability classification API.

    Can be used as an async context manager; an internally created
    `httpx.AsyncClient` is closed on exit, an injected one is left open.

    Attributes:
        base_url: Default API base URL (e.g. "http://localhost:8080/api/v1").
        endpoints: Per-language base URL overrides.
        failed_paths: Files whose analysis failed and was reported as clean.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_CLASSIFIER_URL,
        endpoints: Mapping[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = CLASSIFIER_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.endpoints = dict(endpoints or {})
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self.failed_paths: list[str] = []

    async def __aenter__(self) -> "HttpClassifierClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def analyze(self, code: str, file_path: str) -> list[Finding]:
        try:
            return await self.analyze_or_raise(code, file_path)
        except UnsupportedFileError as e:
            debug(e.message)
            return []
        except ClassifierError as e:
            warn(f"Classifier failed for {file_path}: {e.message}")
            self.failed_paths.append(file_path)
            return []

    async def analyze_or_raise(self, code: str, file_path: str) -> list[Finding]:
        """
        Same as `analyze` but raises instead of failing open.

        Raises:
            UnsupportedFileError: If the extension has no language mapping.
            ClassifierError: On transport errors, non-success status or a
                malformed response body.
        """
        language = language_for_path(file_path)
        if language is None:
            raise UnsupportedFileError(file_path)

        url = resolve_endpoint(language, self.base_url, self.endpoints)
        body = {"code": code, "language": str(language), "file_path": file_path}

        try:
            response = await self._client.post(url, json=body)
        except httpx.HTTPError as e:
            raise ClassifierError(
                f"Request to {url} failed", file_path, original_exception=e
            ) from e

        if not response.is_success:
            raise ClassifierError(
                f"API error: {response.status_code}", file_path, response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ClassifierError(
                "Response body is not JSON", file_path, original_exception=e
            ) from e

        findings = parse_findings(data, file_path)
        debug(f"{file_path}: {len(findings)} finding(s), cached={data.get('cached')}")
        return findings

    async def check_health(self) -> bool:
        """Return True if `GET {base}/health` answers with a success status."""
        try:
            response = await self._client.get(f"{self.base_url}/health")
        except httpx.HTTPError:
            return False
        return response.is_success


CompletionFn = Callable[..., Awaitable[Any]]


class LlmClassifierClient:
    """
    Classifier backed by a chat model through litellm.

    The model is asked to answer with the JSON document described in
    SAMPLE_VULNERABILITY_PROMPT; the answer goes through the same normalization
    as the HTTP API response.
    """

    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        api_key: str | None = None,
        counter: TokenCounter | None = None,
        max_input_tokens: int = LLM_MAX_INPUT_TOKENS,
        completion_fn: CompletionFn | None = None,
    ):
        self.model = model
        self.api_key = api_key
        self.counter = counter or TiktokenCounter(model)
        self.max_input_tokens = max_input_tokens
        self._completion = completion_fn or acompletion
        self.failed_paths: list[str] = []

    async def analyze(self, code: str, file_path: str) -> list[Finding]:
        if language_for_path(file_path) is None:
            debug(f"Unsupported file type: {file_path}")
            return []

        if self.counter.count(code) > self.max_input_tokens:
            warn(f"{file_path} exceeds {self.max_input_tokens} tokens, truncating")
            code = self.counter.truncate(code, self.max_input_tokens)

        prompt = f"{SAMPLE_VULNERABILITY_PROMPT}\n\nFileName: {file_path}\n\nCode:\n{code}"
        try:
            response = await self._completion(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                api_key=self.api_key,
                temperature=0.1,
                response_format={"type": "json_object"},
            )
            text = response.choices[0].message.content
            if not text:
                return []
            return parse_findings(json.loads(text), file_path)
        except ClassifierError as e:
            warn(f"Error analyzing {file_path}: {e.message}")
        except Exception as e:  # noqa: BLE001
            # litellm surfaces provider errors as many unrelated exception types
            warn(f"Error analyzing {file_path}: {type(e).__name__}: {e}")
        self.failed_paths.append(file_path)
        return []


class MockClassifier:
    """
    Mock implementation of VulnerabilityClassifier for testing.

    Returns configured findings per file path and records every call, allowing
    orchestrator tests to run without HTTP.
    """

    def __init__(
        self,
        findings_by_path: Mapping[str, list[Finding]] | None = None,
        analyze_fn: Callable[[str, str], Awaitable[list[Finding]]] | None = None,
    ):
        self.findings_by_path = dict(findings_by_path or {})
        self.analyze_fn = analyze_fn
        self.analyze_calls: list[tuple[str, str]] = []

    async def analyze(self, code: str, file_path: str) -> list[Finding]:
        self.analyze_calls.append((code, file_path))
        if self.analyze_fn is not None:
            return await self.analyze_fn(code, file_path)
        return list(self.findings_by_path.get(file_path, []))
