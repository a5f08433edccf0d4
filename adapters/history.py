"""
Scan history adapter for the hosted Supabase/Postgrest database.

Completed scans are stored in a `scans` table owned by the signed-in user. The
store is optional: nothing in the scan pipeline depends on it, and every method
degrades to a neutral value (None, [] or False) with a warning when the request
fails or no user is signed in.
"""

from collections.abc import Iterable
from typing import Any

import httpx

from constants import HISTORY_LIST_LIMIT, HISTORY_SNIPPET_LIMIT, HISTORY_TABLE
from core.exceptions import HistoryStoreError
from core.models import Finding, ScanRecord, ScanType
from core.report import finding_to_dict
from core.session import Session
from utils import debug, warn


class SupabaseHistoryStore:
    """
    History store backed by the Postgrest API of a Supabase project.

    Attributes:
        session: Supplies the user id and access token for row-level security.
        supabase_url: Project URL (e.g. "https://xyz.supabase.co").
        supabase_key: The project's anonymous API key.
    """

    def __init__(
        self,
        session: Session,
        supabase_url: str,
        supabase_key: str,
        client: httpx.AsyncClient | None = None,
    ):
        self.session = session
        self.supabase_url = supabase_url.rstrip("/")
        self.supabase_key = supabase_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=30.0)

    async def __aenter__(self) -> "SupabaseHistoryStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def table_url(self) -> str:
        return f"{self.supabase_url}/rest/v1/{HISTORY_TABLE}"

    def _headers(self) -> dict[str, str]:
        token = self.session.access_token or self.supabase_key
        return {
            "apikey": self.supabase_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request to the scans table.

        Raises:
            HistoryStoreError: On transport errors or non-success status codes.
        """
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = await self._client.request(
                method, self.table_url, headers=headers, **kwargs
            )
        except httpx.HTTPError as e:
            raise HistoryStoreError(
                f"{method} {self.table_url} failed", original_exception=e
            ) from e
        if not response.is_success:
            raise HistoryStoreError(
                f"History store returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def save_scan(
        self,
        scan_type: ScanType,
        target_name: str,
        findings: Iterable[Finding],
        language: str | None = None,
        code_snippet: str | None = None,
    ) -> ScanRecord | None:
        """
        Store a completed scan for the signed-in user.

        Returns:
            The stored record (with generated id and timestamp), or None when
            no user is signed in or the store rejected the insert.
        """
        if not self.session.user_id:
            debug("No user logged in, scan not saved")
            return None

        vulnerabilities = [finding_to_dict(f) for f in findings]
        row = {
            "user_id": self.session.user_id,
            "scan_type": str(scan_type),
            "target_name": target_name,
            "language": language or None,
            "vulnerabilities_count": len(vulnerabilities),
            "vulnerabilities": vulnerabilities,
            "code_snippet": (
                code_snippet[:HISTORY_SNIPPET_LIMIT] if code_snippet else None
            ),
        }
        try:
            response = await self._request(
                "POST", json=row, headers={"Prefer": "return=representation"}
            )
            data = response.json()
        except (HistoryStoreError, ValueError) as e:
            warn(f"Error saving scan: {e}")
            return None

        stored = data[0] if isinstance(data, list) and data else data
        if not isinstance(stored, dict):
            warn("Error saving scan: unexpected response body")
            return None
        return _to_scan_record(stored)

    async def list_scans(self) -> list[ScanRecord]:
        """Return the signed-in user's scans, newest first."""
        if not self.session.user_id:
            return []

        params = {
            "select": "*",
            "user_id": f"eq.{self.session.user_id}",
            "order": "created_at.desc",
            "limit": str(HISTORY_LIST_LIMIT),
        }
        try:
            response = await self._request("GET", params=params)
            data = response.json()
        except (HistoryStoreError, ValueError) as e:
            warn(f"Error fetching scans: {e}")
            return []

        if not isinstance(data, list):
            return []
        return [_to_scan_record(row) for row in data if isinstance(row, dict)]

    async def delete_scan(self, scan_id: str) -> bool:
        try:
            await self._request("DELETE", params={"id": f"eq.{scan_id}"})
        except HistoryStoreError as e:
            warn(f"Error deleting scan: {e}")
            return False
        return True


def _to_scan_record(row: dict) -> ScanRecord:
    try:
        scan_type = ScanType(row.get("scan_type"))
    except ValueError:
        scan_type = ScanType.QUICK_SCAN
    vulnerabilities = row.get("vulnerabilities") or []
    return ScanRecord(
        id=str(row.get("id", "")),
        user_id=str(row.get("user_id", "")),
        scan_type=scan_type,
        target_name=row.get("target_name", ""),
        vulnerabilities_count=row.get("vulnerabilities_count", len(vulnerabilities)),
        created_at=row.get("created_at", ""),
        language=row.get("language"),
        vulnerabilities=list(vulnerabilities),
        code_snippet=row.get("code_snippet"),
    )
