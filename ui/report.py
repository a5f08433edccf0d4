"""
Rich rendering of repositories, candidates, scan results and history.

All functions print to the shared console from `utils` (or the one passed in)
and have no other side effects.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from core.models import (
    FileScanResult,
    Finding,
    GitHubRepo,
    RepositoryFile,
    ScanRecord,
    ScanStatus,
    Severity,
)
from core.report import all_findings, highest_severity, summarize
from utils import console as default_console

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "dark_orange",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.INFO: "grey62",
}


def severity_label(severity: Severity) -> str:
    return f"[{SEVERITY_STYLES[severity]}]{severity.value.upper()}[/]"


def render_repositories(
    repos: list[GitHubRepo], console: Console = default_console
) -> None:
    table = Table(title="Repositories", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Repository", style="bold")
    table.add_column("Language")
    table.add_column("★", justify="right")
    table.add_column("Updated")
    table.add_column("Description", overflow="fold")
    for index, repo in enumerate(repos, start=1):
        table.add_row(
            str(index),
            repo.full_name,
            repo.language or "Unknown",
            str(repo.stargazers_count),
            repo.updated_at[:10],
            repo.description or "No description provided.",
        )
    console.print(table)


def render_candidates(
    candidates: tuple[RepositoryFile, ...], console: Console = default_console
) -> None:
    console.print(
        f"\n[bold]Ready to Scan[/bold]: found [green]{len(candidates)}[/green] relevant files"
    )
    for candidate in candidates:
        console.print(f"  📄 [dim]{candidate.path}[/dim]")


def render_finding(finding: Finding, console: Console = default_console) -> None:
    console.print(
        f"    {severity_label(finding.severity)} [bold]{finding.category}[/bold] "
        f"[dim]Line {finding.line_number}[/dim]"
    )
    if finding.description:
        console.print(f"      {finding.description}", markup=False)


def render_results(
    results: tuple[FileScanResult, ...] | list[FileScanResult],
    console: Console = default_console,
    show_code: bool = False,
) -> None:
    """
    Print every file result, its findings and a severity summary.

    With `show_code`, each finding's evidence snippet (and remediation, when
    present) is printed below it.
    """
    if not results:
        console.print(
            Panel(
                "The repository might be empty or contains no supported JS/PHP files.",
                title="No files scanned",
            )
        )
        return

    for result in results:
        if result.status is ScanStatus.VULNERABLE:
            badge = f"[red]{len(result.findings)} VULNERABILITIES[/red]"
            dot = "[red]●[/red]"
        else:
            badge = "[green]SECURE[/green]"
            dot = "[green]●[/green]"
        console.print(f"{dot} [bold]{result.file_path}[/bold]  {badge}")
        for finding in result.findings:
            render_finding(finding, console)
            if show_code:
                render_evidence(finding, result.file_path, console)

    render_summary(results, console)


def render_evidence(
    finding: Finding, file_path: str = "", console: Console = default_console
) -> None:
    if finding.evidence_snippet:
        lexer = Syntax.guess_lexer(file_path, code=finding.evidence_snippet)
        console.print(
            Panel(
                Syntax(finding.evidence_snippet, lexer, word_wrap=True),
                title="Vulnerable Code",
                border_style="red",
            )
        )
    if finding.remediation:
        console.print(
            Panel(finding.remediation, title="Suggested Fix", border_style="green")
        )


def render_summary(
    results: tuple[FileScanResult, ...] | list[FileScanResult],
    console: Console = default_console,
) -> None:
    counts = summarize(results)
    vulnerable = sum(1 for r in results if r.status is ScanStatus.VULNERABLE)
    top = highest_severity(all_findings(results))

    table = Table(title="Scan Report", box=box.ROUNDED)
    table.add_column("Files")
    table.add_column("Vulnerable")
    for severity in counts:
        table.add_column(severity.value, justify="right", style=SEVERITY_STYLES[severity])
    table.add_column("Highest")
    table.add_row(
        str(len(results)),
        str(vulnerable),
        *(str(n) for n in counts.values()),
        severity_label(top) if top is not None else "-",
    )
    console.print(table)


def render_history(records: list[ScanRecord], console: Console = default_console) -> None:
    if not records:
        console.print("[dim]No scans saved yet.[/dim]")
        return

    table = Table(title="Scan History", box=box.SIMPLE_HEAVY)
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Type")
    table.add_column("Target", style="bold")
    table.add_column("Language")
    table.add_column("Findings", justify="right")
    table.add_column("Created")
    for record in records:
        count_style = "red" if record.vulnerabilities_count else "green"
        table.add_row(
            record.id,
            "GitHub repo" if record.scan_type == "github_repo" else "Quick scan",
            record.target_name,
            record.language or "-",
            f"[{count_style}]{record.vulnerabilities_count}[/]",
            record.created_at[:19].replace("T", " "),
        )
    console.print(table)
