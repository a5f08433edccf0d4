"""
Core data models for the repository scanning pipeline.

This module defines the data structures used to represent repository listings,
classifier findings, per-file scan outcomes and the run-scoped state of the
scan orchestrator within the VulnLens CLI.
"""

from dataclasses import dataclass, field
from enum import Enum, StrEnum
from pathlib import PurePosixPath


class FileKind(StrEnum):
    BLOB = "blob"
    TREE = "tree"


@dataclass(frozen=True)
class RepositoryFile:
    """
    One entry of a repository's recursive file tree.

    Attributes:
        path: Repo-relative path using forward slashes (e.g., "src/login.php").
        kind: Whether the entry is a file (blob) or a directory (tree).
        content_ref: Opaque handle used to fetch the content later. For GitHub
            this is the blob API URL.
    """

    path: str
    kind: FileKind
    content_ref: str = ""

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name


class Severity(StrEnum):
    """
    Ordered severity scale for findings.

    The string values are the display labels. Use `rank` (or the comparison
    operators) for ordering: Critical > High > Medium > Low > Info.
    """

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFO = "Info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]

    def __lt__(self, other):
        if isinstance(other, Severity):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, Severity):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, Severity):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, Severity):
            return self.rank >= other.rank
        return NotImplemented


_SEVERITY_RANKS = {
    Severity.INFO: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


@dataclass(frozen=True)
class Finding:
    """
    A single issue reported by the classifier for one file.

    Attributes:
        category: Free-form label such as "Reflected XSS".
        severity: Normalized severity.
        line_number: 1-based line of the issue. Defaults to 1 when unknown.
        description: Short explanation of why the code is vulnerable.
        evidence_snippet: The offending code fragment.
        remediation: Suggested fix, if the classifier provided one.
    """

    category: str
    severity: Severity
    line_number: int = 1
    description: str = ""
    evidence_snippet: str = ""
    remediation: str | None = None


class ScanStatus(StrEnum):
    SAFE = "safe"
    VULNERABLE = "vulnerable"
    ERROR = "error"


@dataclass(frozen=True)
class FileScanResult:
    file_name: str
    file_path: str
    findings: tuple[Finding, ...] = ()
    status: ScanStatus = ScanStatus.SAFE
    raw_code: str | None = None

    @classmethod
    def from_findings(
        cls, file_path: str, findings: list[Finding], raw_code: str | None = None
    ) -> "FileScanResult":
        """Build a result whose status follows from whether anything was found."""
        return cls(
            file_name=PurePosixPath(file_path).name or file_path,
            file_path=file_path,
            findings=tuple(findings),
            status=ScanStatus.VULNERABLE if findings else ScanStatus.SAFE,
            raw_code=raw_code,
        )


class ScanState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    SCANNING = "scanning"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ScanRun:
    """
    Immutable snapshot of the orchestrator's run-scoped state.

    Attributes:
        state: Current position in the idle/fetching/ready/scanning/complete
            state machine.
        target: "owner/repo" of the repository being scanned, empty when idle.
        candidates: The selected files, in analysis order.
        results: Per-file outcomes recorded so far, in candidate order.
        progress_percent: Integer 0..100, recomputed after every candidate.
        current_file_path: Path of the file in flight, or "" when none.
    """

    state: ScanState = ScanState.IDLE
    target: str = ""
    candidates: tuple[RepositoryFile, ...] = ()
    results: tuple[FileScanResult, ...] = ()
    progress_percent: int = 0
    current_file_path: str = ""


@dataclass(frozen=True)
class GitHubRepo:
    id: int
    name: str
    full_name: str
    owner_login: str
    description: str | None = None
    html_url: str = ""
    language: str | None = None
    stargazers_count: int = 0
    updated_at: str = ""


class ScanType(StrEnum):
    QUICK_SCAN = "quick_scan"
    GITHUB_REPO = "github_repo"


@dataclass(frozen=True)
class ScanRecord:
    """A persisted scan as returned by the history store."""

    id: str
    user_id: str
    scan_type: ScanType
    target_name: str
    vulnerabilities_count: int
    created_at: str
    language: str | None = None
    vulnerabilities: list[dict] = field(default_factory=list)
    code_snippet: str | None = None
