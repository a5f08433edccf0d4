"""
GitHub adapter for repository discovery and content retrieval.

This module provides the repository source used by the scan orchestrator: it
lists a repository's recursive file tree and fetches individual blobs through
the GitHub REST API. It also covers the account-level calls the CLI needs
(token validation and repository listing).

Scan-path calls (`list_files`, `fetch_content`) never raise. Failures are
reported as warnings and degrade to an empty listing or empty content, so that
the scan reaches a terminal state with whatever could be retrieved.
"""

import asyncio
import base64
import binascii
from typing import Any, Protocol

import httpx

from constants import GITHUB_ACCEPT, GITHUB_API_BASE, SOURCE_TIMEOUT_SECONDS
from core.exceptions import SourceUnavailableError
from core.models import FileKind, GitHubRepo, RepositoryFile
from core.session import Session
from utils import debug, warn


class RepositorySource(Protocol):
    """Protocol for anything that can list a repository and fetch its files."""

    async def list_files(self, owner: str, repo_name: str) -> list[RepositoryFile]:
        """Return the full recursive listing of the default branch, or []."""

    async def fetch_content(self, ref: str) -> str:
        """Return the decoded text addressed by `ref`, or "" on failure."""


class GitHubRepositorySource:
    """
    Repository source backed by the GitHub REST API.

    Attributes:
        session: Supplies the bearer token (`provider_token`) for every request.
        base_url: API root, "https://api.github.com" by default.
        timeout: Wall-clock limit in seconds for each of the two listing calls.
    """

    def __init__(
        self,
        session: Session,
        client: httpx.AsyncClient | None = None,
        base_url: str = GITHUB_API_BASE,
        timeout: float = SOURCE_TIMEOUT_SECONDS,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "GitHubRepositorySource":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, accept: str | None = GITHUB_ACCEPT) -> dict[str, str]:
        headers = {}
        if self.session.provider_token:
            headers["Authorization"] = f"Bearer {self.session.provider_token}"
        if accept:
            headers["Accept"] = accept
        return headers

    async def _get_json(self, url: str, timeout: float | None = None) -> Any:
        """
        GET `url` and decode its JSON body.

        Raises:
            SourceUnavailableError: On transport errors, timeouts, non-success
                status codes or an undecodable body.
        """
        try:
            request = self._client.get(url, headers=self._headers())
            if timeout is not None:
                response = await asyncio.wait_for(request, timeout=timeout)
            else:
                response = await request
        except TimeoutError as e:
            raise SourceUnavailableError(
                f"Request timeout after {timeout}s", url=url, original_exception=e
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailableError(
                f"Request to {url} failed", url=url, original_exception=e
            ) from e

        debug(f"GET {url} -> {response.status_code}")
        if not response.is_success:
            raise SourceUnavailableError(
                f"GitHub API returned {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailableError(
                "GitHub API returned a non-JSON body", url=url, original_exception=e
            ) from e

    async def list_files(self, owner: str, repo_name: str) -> list[RepositoryFile]:
        try:
            return await self.list_files_or_raise(owner, repo_name)
        except SourceUnavailableError as e:
            warn(f"Error fetching files for {owner}/{repo_name}: {e.message}")
            return []

    async def list_files_or_raise(
        self, owner: str, repo_name: str
    ) -> list[RepositoryFile]:
        """
        Resolve the default branch and return its recursive tree.

        Raises:
            SourceUnavailableError: If either call fails or the tree is missing.
        """
        repo_url = f"{self.base_url}/repos/{owner}/{repo_name}"
        details = await self._get_json(repo_url, timeout=self.timeout)
        branch = "main"
        if isinstance(details, dict) and details.get("default_branch"):
            branch = details["default_branch"]
        debug(f"Using branch: {branch}")

        tree_url = f"{repo_url}/git/trees/{branch}?recursive=1"
        data = await self._get_json(tree_url, timeout=self.timeout)
        tree = data.get("tree") if isinstance(data, dict) else None
        if not isinstance(tree, list):
            raise SourceUnavailableError("No tree data returned", url=tree_url)

        files = [_to_repository_file(entry) for entry in tree if isinstance(entry, dict)]
        debug(f"Found {len(files)} tree entries in {owner}/{repo_name}")
        return [f for f in files if f is not None]

    async def fetch_content(self, ref: str) -> str:
        try:
            data = await self._get_json(ref)
        except SourceUnavailableError as e:
            warn(f"Error fetching file content: {e.message}")
            return ""

        if not isinstance(data, dict):
            return ""
        content = data.get("content")
        if not isinstance(content, str) or data.get("encoding") != "base64":
            return ""
        try:
            raw = base64.b64decode(content.replace("\n", ""))
        except (binascii.Error, ValueError) as e:
            warn(f"Could not decode content from {ref}: {e}")
            return ""
        return raw.decode("utf-8", errors="replace")

    async def validate_token(self) -> bool:
        """Return True if the session's token is accepted by `GET /user`."""
        try:
            await self._get_json(f"{self.base_url}/user")
        except SourceUnavailableError as e:
            debug(f"Token validation failed: {e.message}")
            return False
        return True

    async def list_repositories(self) -> list[GitHubRepo]:
        """
        List the authenticated user's repositories, most recently updated first.

        Raises:
            SourceUnavailableError: If the listing request fails.
        """
        url = f"{self.base_url}/user/repos?sort=updated&per_page=100&visibility=all"
        data = await self._get_json(url)
        if not isinstance(data, list):
            raise SourceUnavailableError("Failed to fetch repositories", url=url)
        return [_to_github_repo(item) for item in data if isinstance(item, dict)]


def _to_repository_file(entry: dict) -> RepositoryFile | None:
    path = entry.get("path")
    try:
        kind = FileKind(entry.get("type"))
    except ValueError:
        # submodules ("commit") and other non-file entries
        return None
    if not path:
        return None
    return RepositoryFile(path=path, kind=kind, content_ref=entry.get("url") or "")


def _to_github_repo(item: dict) -> GitHubRepo:
    return GitHubRepo(
        id=item.get("id", 0),
        name=item.get("name", ""),
        full_name=item.get("full_name", ""),
        owner_login=(item.get("owner") or {}).get("login", ""),
        description=item.get("description"),
        html_url=item.get("html_url", ""),
        language=item.get("language"),
        stargazers_count=item.get("stargazers_count", 0),
        updated_at=item.get("updated_at", ""),
    )


def filter_repositories(
    repos: list[GitHubRepo], search: str = "", language: str | None = None
) -> list[GitHubRepo]:
    """
    Filter repositories by a case-insensitive name search and exact language.

    A language of None or "All" disables language filtering.
    """
    needle = search.lower()
    wanted = None if not language or language == "All" else language.lower()
    return [
        repo
        for repo in repos
        if needle in repo.full_name.lower()
        and (wanted is None or (repo.language or "").lower() == wanted)
    ]


def unique_languages(repos: list[GitHubRepo]) -> list[str]:
    """Return "All" followed by the distinct repository languages in order."""
    seen: list[str] = []
    for repo in repos:
        if repo.language and repo.language not in seen:
            seen.append(repo.language)
    return ["All", *seen]


class MockRepositorySource:
    """
    Mock implementation of RepositorySource for testing.

    Serves a fixed listing and a path-to-content mapping (keyed by
    `content_ref`), and records every call.
    """

    def __init__(
        self,
        files: list[RepositoryFile] | None = None,
        contents: dict[str, str] | None = None,
    ):
        self.files = list(files or [])
        self.contents = dict(contents or {})
        self.list_files_calls: list[tuple[str, str]] = []
        self.fetch_content_calls: list[str] = []

    async def list_files(self, owner: str, repo_name: str) -> list[RepositoryFile]:
        self.list_files_calls.append((owner, repo_name))
        return list(self.files)

    async def fetch_content(self, ref: str) -> str:
        self.fetch_content_calls.append(ref)
        return self.contents.get(ref, "")
