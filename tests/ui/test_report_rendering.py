"""
Comprehensive tests for the ui.report module using pytest.

Tests cover:
- severity_label: colour markup per severity
- render_results: per-file lines, empty panel, evidence and remediation
- render_summary / render_candidates / render_repositories / render_history

Rendering goes to a recording Console so the plain text can be inspected.
"""

import pytest
from rich.console import Console

from core.models import (
    FileKind,
    FileScanResult,
    Finding,
    GitHubRepo,
    RepositoryFile,
    ScanRecord,
    ScanType,
    Severity,
)
from ui.report import (
    SEVERITY_STYLES,
    render_candidates,
    render_history,
    render_repositories,
    render_results,
    render_summary,
    severity_label,
)


@pytest.fixture
def console():
    return Console(record=True, width=160, color_system=None)


@pytest.fixture
def results(xss_finding):
    return [
        FileScanResult.from_findings("b.php", [xss_finding]),
        FileScanResult.from_findings("a.js", []),
    ]


# ============================================================================
# Tests for severity_label
# ============================================================================


@pytest.mark.unit
def test_every_severity_has_a_style():
    assert set(SEVERITY_STYLES) == set(Severity)


@pytest.mark.unit
def test_severity_label_markup():
    assert severity_label(Severity.CRITICAL) == "[bold red]CRITICAL[/]"


# ============================================================================
# Tests for render_results
# ============================================================================


@pytest.mark.unit
def test_render_results_lists_files_and_findings(console, results):
    render_results(results, console)

    text = console.export_text()
    assert "b.php" in text
    assert "1 VULNERABILITIES" in text
    assert "a.js" in text
    assert "SECURE" in text
    assert "HIGH" in text
    assert "Line 3" in text
    assert "User input echoed without escaping" in text
    assert "Scan Report" in text


@pytest.mark.unit
def test_render_results_hides_code_by_default(console, results):
    render_results(results, console)

    assert "Suggested Fix" not in console.export_text()


@pytest.mark.unit
def test_render_results_show_code(console, results):
    render_results(results, console, show_code=True)

    text = console.export_text()
    assert "Vulnerable Code" in text
    assert "Suggested Fix" in text
    assert "htmlspecialchars" in text


@pytest.mark.unit
def test_render_results_empty(console):
    render_results([], console)

    text = console.export_text()
    assert "No files scanned" in text
    assert "Scan Report" not in text


# ============================================================================
# Tests for render_summary
# ============================================================================


@pytest.mark.unit
def test_render_summary_counts(console, results):
    render_summary(results, console)

    text = console.export_text()
    for severity in Severity:
        assert severity.value in text


@pytest.mark.unit
def test_render_summary_shows_highest_severity(console, results):
    critical = FileScanResult.from_findings("c.php", [Finding("RCE", Severity.CRITICAL)])

    render_summary([*results, critical], console)

    text = console.export_text()
    assert "Highest" in text
    assert "CRITICAL" in text


@pytest.mark.unit
def test_render_summary_clean_scan_has_no_highest_severity(console):
    render_summary([FileScanResult.from_findings("a.js", [])], console)

    text = console.export_text()
    assert "Highest" in text
    assert not any(severity.value.upper() in text for severity in Severity)


# ============================================================================
# Tests for the list renderers
# ============================================================================


@pytest.mark.unit
def test_render_candidates(console):
    render_candidates(
        (RepositoryFile("src/login.php", FileKind.BLOB), RepositoryFile("a.js", FileKind.BLOB)),
        console,
    )

    text = console.export_text()
    assert "found 2 relevant files" in text
    assert "src/login.php" in text


@pytest.mark.unit
def test_render_repositories(console):
    repo = GitHubRepo(
        id=1,
        name="demo",
        full_name="octo/demo",
        owner_login="octo",
        language=None,
        stargazers_count=5,
        updated_at="2024-05-01T10:00:00Z",
    )

    render_repositories([repo], console)

    text = console.export_text()
    assert "octo/demo" in text
    assert "Unknown" in text
    assert "2024-05-01" in text
    assert "No description provided." in text


@pytest.mark.unit
def test_render_history(console):
    record = ScanRecord(
        id="scan-1",
        user_id="user-1",
        scan_type=ScanType.QUICK_SCAN,
        target_name="code.js",
        vulnerabilities_count=2,
        created_at="2024-05-01T10:00:00+00:00",
        language="js",
        vulnerabilities=[],
        code_snippet=None,
    )

    render_history([record], console)

    text = console.export_text()
    assert "scan-1" in text
    assert "Quick scan" in text
    assert "2024-05-01 10:00:00" in text


@pytest.mark.unit
def test_render_history_empty(console):
    render_history([], console)

    assert "No scans saved yet." in console.export_text()
