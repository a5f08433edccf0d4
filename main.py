"""
VulnLens CLI Entry Point.

This module implements the command-line interface for VulnLens, a tool that
scans GitHub repositories and individual source files for XSS and code injection
vulnerabilities with a remote classifier (the CodeBERT inference API, or a chat
model through litellm).

A repository scan operates in four distinct stages:

1.  **Fetching**: The repository's recursive file tree is listed through the
    GitHub REST API using the configured token.
2.  **Selection**: The listing is narrowed to a bounded, prioritized candidate
    set with the heuristics defined in `constants.py` and shown to the user for
    confirmation.
3.  **Scanning**: Candidates are fetched and analyzed one at a time while a Rich
    progress bar tracks the percentage and the file in flight.
4.  **Reporting**: Results are rendered as a severity-coloured report and can be
    exported as JSONL (`--output`) or saved to the hosted scan history (`--save`).

Usage:
    Run directly as a script or via the installed entry point.

    $ vulnlens scan octocat/hello-world
    $ vulnlens quick login.php --show-code
    $ cat snippet.js | vulnlens quick --language js

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal UI, colors, and progress visualization.
    - Inquirer: Interactive terminal user prompts.
    - httpx: Async HTTP client for GitHub, the classifier and the history store.
    - litellm: Optional LLM classifier backend.
"""

import asyncio
import sys
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Annotated
from urllib.parse import urlparse

import typer
from rich import print as pr

from adapters.github import (
    GitHubRepositorySource,
    filter_repositories,
    unique_languages,
)
from adapters.history import SupabaseHistoryStore
from constants import QUICK_SCAN_FILENAMES
from core.classifier import (
    HttpClassifierClient,
    LlmClassifierClient,
    VulnerabilityClassifier,
    language_for_path,
)
from core.config import Settings, load_settings, save_config
from core.exceptions import (
    ConfigError,
    FileIOError,
    NotAuthenticatedError,
    SourceUnavailableError,
)
from core.file_io import FilesystemFileReader, FilesystemFileWriter
from core.models import FileScanResult, ScanRun, ScanType
from core.orchestrator import ScanOrchestrator
from core.report import all_findings, export_results
from core.selection import with_max_candidates
from core.session import Session
from models import ClassifierBackend, SupportedLanguage
from ui.progress_display import RichProgressDisplay, ScanProgressListener
from ui.prompts import (
    confirm,
    edit_settings,
    make_language_filter_selection,
    make_language_selection,
    make_repository_selection,
)
from ui.report import (
    render_candidates,
    render_history,
    render_repositories,
    render_results,
)
from utils import set_verbose, warn

app = typer.Typer(help="Scan GitHub repositories for XSS and code injection.")
history_app = typer.Typer(help="Browse and delete saved scans.")
app.add_typer(history_app, name="history")

TokenOption = Annotated[
    str | None,
    typer.Option(
        "--token",
        envvar="GITHUB_TOKEN",
        help="GitHub token. Overrides the configured one.",
        show_default=False,
    ),
]
BackendOption = Annotated[
    ClassifierBackend | None,
    typer.Option(help="Classifier backend. Overrides the configured one."),
]
SaveOption = Annotated[
    bool, typer.Option("--save", help="Store the scan in the hosted history.")
]
ShowCodeOption = Annotated[
    bool,
    typer.Option("--show-code", help="Print the vulnerable code and suggested fixes."),
]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    configure: Annotated[
        bool,
        typer.Option(
            "--configure",
            "-c",
            help="Edit settings (shows current values for editing).",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Print debug output.")
    ] = False,
):
    """
    The main entry point for the VulnLens CLI application.

    Handles the global options before any sub-command runs: `--verbose` enables
    debug output, `--configure` opens the interactive settings editor and exits.
    Without a sub-command the help text is printed.
    """
    set_verbose(verbose)

    if configure:
        edit_config()
        raise typer.Exit(0)

    if ctx.invoked_subcommand is None:
        pr(ctx.get_help())
        raise typer.Exit(0)


@app.command()
def repos(
    search: Annotated[
        str, typer.Option(help="Case-insensitive substring of owner/name.")
    ] = "",
    language: Annotated[
        str | None, typer.Option(help="Only repositories in this language.")
    ] = None,
    choose_language: Annotated[
        bool,
        typer.Option(
            "--choose-language",
            help="Pick the language filter from the languages of your repositories.",
        ),
    ] = False,
    token: TokenOption = None,
):
    """List your GitHub repositories, most recently updated first."""
    settings = get_settings()
    session = build_session(settings, token)

    async def _list():
        async with GitHubRepositorySource(session) as source:
            return await source.list_repositories()

    try:
        require_token(session)
        found = asyncio.run(_list())
    except NotAuthenticatedError as e:
        print_not_authenticated_err(e)
    except SourceUnavailableError as e:
        print_source_err(e)

    if choose_language and language is None:
        language = make_language_filter_selection(unique_languages(found))

    render_repositories(filter_repositories(found, search, language))


@app.command()
def scan(
    repository: Annotated[
        str | None,
        typer.Argument(
            help="owner/repo or a github.com URL. Prompts for a selection if omitted.",
            show_default=False,
        ),
    ] = None,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            dir_okay=False,
            resolve_path=True,
            help="Write the results to this file as JSON lines.",
        ),
    ] = None,
    max_files: Annotated[
        int | None,
        typer.Option(min=1, help="Maximum number of files to analyze."),
    ] = None,
    show_code: ShowCodeOption = False,
    save: SaveOption = False,
    backend: BackendOption = None,
    token: TokenOption = None,
):
    """
    Scan a GitHub repository.

    The repository tree is listed, narrowed to the most relevant JS/PHP files and,
    after confirmation, every selected file is analyzed in order.

    Raises:
        typer.Exit: On an invalid repository name, a missing token, an
            unreachable GitHub API, a failed report export or Ctrl-C.
    """
    settings = get_settings()
    session = build_session(settings, token)

    try:
        require_token(session)
        if repository is None:
            owner, repo_name = select_repository(session)
        else:
            owner, repo_name = normalize_repository(repository)
    except NotAuthenticatedError as e:
        print_not_authenticated_err(e)
    except SourceUnavailableError as e:
        print_source_err(e)
    except ValueError as e:
        pr(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    pr(f"\n[green]Scanning: {owner}/{repo_name}...[/green]")

    try:
        run = asyncio.run(
            scan_repository(
                settings,
                session,
                owner,
                repo_name,
                backend=backend,
                max_files=max_files,
                yes=yes,
            )
        )
    except KeyboardInterrupt as e:
        pr("\n[yellow]Scan cancelled.[/yellow]")
        raise typer.Exit(code=130) from e
    except typer.Exit:
        raise
    except Exception as e:  # noqa: BLE001
        # Catch-all for any unexpected errors - ensures users always see
        # a friendly message instead of a raw Python stack trace
        print_unexpected_err(e)

    render_results(run.results, show_code=show_code)

    if output is not None:
        try:
            writer = FilesystemFileWriter.from_path(output)
            written = export_results(run.results, writer, target=run.target)
        except FileIOError as e:
            print_file_io_err(e)
        pr(f"[green]Report written to {output} ({written} files).[/green]")

    if save:
        save_to_history(
            settings,
            session,
            ScanType.GITHUB_REPO,
            run.target,
            run.results,
        )


async def scan_repository(
    settings: Settings,
    session: Session,
    owner: str,
    repo_name: str,
    backend: ClassifierBackend | None = None,
    max_files: int | None = None,
    yes: bool = False,
) -> ScanRun:
    """
    Run the orchestrator for one repository with a live progress bar.

    Returns:
        The final snapshot. If the user declines the confirmation prompt the
        command exits before any file is analyzed.
    """
    heuristics = with_max_candidates(max_files or settings.max_candidates)

    async with AsyncExitStack() as stack:
        source = await stack.enter_async_context(GitHubRepositorySource(session))
        classifier = build_classifier(settings, backend)
        if isinstance(classifier, HttpClassifierClient):
            await stack.enter_async_context(classifier)

        orchestrator = ScanOrchestrator(source, classifier, heuristics)
        ready = await orchestrator.start(owner, repo_name)
        render_candidates(ready.candidates)

        if ready.candidates and not yes:
            if not confirm(f"Analyze {len(ready.candidates)} files?"):
                raise typer.Exit()

        try:
            with RichProgressDisplay() as display:
                unsubscribe = orchestrator.subscribe(ScanProgressListener(display))
                try:
                    run = await orchestrator.run_scan()
                finally:
                    unsubscribe()
        except asyncio.CancelledError:
            orchestrator.cancel()
            raise

        failed = getattr(classifier, "failed_paths", [])
        if failed:
            warn(f"{len(failed)} files could not be analyzed and are reported as safe.")
        return run


@app.command()
def quick(
    file: Annotated[
        Path | None,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
            help="File to analyze. Reads from stdin if omitted.",
            show_default=False,
        ),
    ] = None,
    language: Annotated[
        SupportedLanguage | None,
        typer.Option(help="Language of the code. Guessed from the file name if omitted."),
    ] = None,
    show_code: ShowCodeOption = False,
    save: SaveOption = False,
    backend: BackendOption = None,
):
    """
    Analyze a single file or a snippet read from stdin.

    Raises:
        typer.Exit: If the input is blank or its language cannot be determined.
    """
    settings = get_settings()

    if file is not None:
        try:
            code = FilesystemFileReader().read_file(file)
        except FileIOError as e:
            print_file_io_err(e)
        language = language or language_for_path(file.name)
        if language is None:
            pr(
                f"[red]Error:[/red] Cannot tell the language of [green]'{file.name}'[/green]. "
                "Pass --language php or --language js."
            )
            raise typer.Exit(code=1)
    else:
        if language is None:
            language = (
                make_language_selection() if sys.stdin.isatty() else SupportedLanguage.JS
            )
        if sys.stdin.isatty():
            pr("[dim]Paste the code, then press Ctrl-D.[/dim]")
        code = sys.stdin.read()

    if not code.strip():
        pr("[red]Error:[/red] Nothing to analyze, the input is empty.")
        raise typer.Exit(code=1)

    if file is not None and language_for_path(file.name) == language:
        file_path = file.name
    else:
        file_path = QUICK_SCAN_FILENAMES[language]

    async def _analyze():
        classifier = build_classifier(settings, backend)
        async with AsyncExitStack() as stack:
            if isinstance(classifier, HttpClassifierClient):
                await stack.enter_async_context(classifier)
            findings = await classifier.analyze(code, file_path)
        return findings, getattr(classifier, "failed_paths", [])

    try:
        findings, failed = asyncio.run(_analyze())
    except KeyboardInterrupt as e:
        pr("\n[yellow]Scan cancelled.[/yellow]")
        raise typer.Exit(code=130) from e

    if failed:
        pr("[red]Error:[/red] The classifier could not analyze the code.")
        raise typer.Exit(code=1)

    result = FileScanResult.from_findings(file_path, findings, raw_code=code)
    render_results([result], show_code=show_code)

    if save:
        save_to_history(
            settings,
            build_session(settings),
            ScanType.QUICK_SCAN,
            file_path,
            [result],
            language=str(language),
            code_snippet=code,
        )


@app.command()
def health():
    """Check that the classifier API is reachable."""
    settings = get_settings()

    async def _check() -> bool:
        async with HttpClassifierClient(
            settings.classifier_url, settings.classifier_urls
        ) as client:
            return await client.check_health()

    if not asyncio.run(_check()):
        pr(f"❌ [bold red]Classifier unreachable[/bold red] at {settings.classifier_url}")
        raise typer.Exit(code=1)
    pr(f"✅ [green]Classifier is up[/green] at {settings.classifier_url}")


@history_app.command("list")
def history_list():
    """Show your saved scans, newest first."""
    settings = get_settings()
    store = require_history_store(settings)

    async def _list():
        async with store:
            return await store.list_scans()

    render_history(asyncio.run(_list()))


@history_app.command("delete")
def history_delete(
    scan_id: Annotated[str, typer.Argument(help="Id of the scan to delete.")],
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")
    ] = False,
):
    """Delete one saved scan."""
    settings = get_settings()
    store = require_history_store(settings)

    if not yes and not confirm(f"Delete scan {scan_id}?", default=False):
        raise typer.Exit()

    async def _delete() -> bool:
        async with store:
            return await store.delete_scan(scan_id)

    if not asyncio.run(_delete()):
        raise typer.Exit(code=1)
    pr(f"[green]Deleted scan {scan_id}.[/green]")


def get_settings() -> Settings:
    """
    Load the persisted settings.

    Raises:
        typer.Exit: If the settings file cannot be read or parsed.
    """
    try:
        return load_settings()
    except ConfigError as e:
        pr("❌ [bold red]Settings Error[/bold red]")
        pr(f"{e.message}: [yellow]{e.file_path}[/yellow]")
        pr("\n[yellow]Quick Fix:[/yellow] Fix the file or run `vulnlens --configure`.")
        raise typer.Exit(code=1) from e
    except FileIOError as e:
        print_file_io_err(e)


def build_session(settings: Settings, token: str | None = None) -> Session:
    """Create the session from settings; an explicit token wins over the stored one."""
    return Session(
        provider_token=token or settings.github_token or None,
        access_token=settings.supabase_access_token or None,
        user_id=settings.supabase_user_id or None,
    )


def require_token(session: Session) -> None:
    if not session.is_authenticated:
        raise NotAuthenticatedError()


def build_classifier(
    settings: Settings, backend: ClassifierBackend | None = None
) -> VulnerabilityClassifier:
    """
    Create the classifier for the selected backend.

    Raises:
        typer.Exit: If the configured backend is unknown, or the LLM backend is
            selected without a model name.
    """
    try:
        backend = backend or ClassifierBackend(settings.classifier_backend)
    except ValueError as e:
        pr(
            f"[red]Error:[/red] Unknown classifier backend "
            f"[yellow]{settings.classifier_backend!r}[/yellow] in settings."
        )
        raise typer.Exit(code=1) from e
    if backend is ClassifierBackend.LLM:
        if not settings.model:
            pr("[red]Error:[/red] The LLM backend needs a model. Run `vulnlens --configure`.")
            raise typer.Exit(code=1)
        return LlmClassifierClient(settings.model, settings.api_key or None)
    return HttpClassifierClient(settings.classifier_url, settings.classifier_urls)


def require_history_store(settings: Settings) -> SupabaseHistoryStore:
    """
    Raises:
        typer.Exit: If no history store is configured.
    """
    if not settings.history_enabled:
        pr(
            "[red]Error:[/red] Scan history is not configured. "
            "Set the history store URL and key with `vulnlens --configure`."
        )
        raise typer.Exit(code=1)
    return SupabaseHistoryStore(
        build_session(settings), settings.supabase_url, settings.supabase_key
    )


def save_to_history(
    settings: Settings,
    session: Session,
    scan_type: ScanType,
    target_name: str,
    results,
    language: str | None = None,
    code_snippet: str | None = None,
) -> None:
    """Store a finished scan. Failures are reported and never abort the command."""
    if not settings.history_enabled:
        warn("Scan history is not configured, scan not saved.")
        return

    async def _save():
        async with SupabaseHistoryStore(
            session, settings.supabase_url, settings.supabase_key
        ) as store:
            return await store.save_scan(
                scan_type,
                target_name,
                all_findings(results),
                language=language,
                code_snippet=code_snippet,
            )

    record = asyncio.run(_save())
    if record is not None:
        pr(f"[green]Scan saved to history ({record.id}).[/green]")


def select_repository(session: Session) -> tuple[str, str]:
    """
    Let the user pick one of their repositories.

    Raises:
        SourceUnavailableError: If the repositories cannot be listed.
    """

    async def _list():
        async with GitHubRepositorySource(session) as source:
            return await source.list_repositories()

    repo = make_repository_selection(asyncio.run(_list()))
    return repo.owner_login, repo.name


def normalize_repository(value: str) -> tuple[str, str]:
    """
    Split a repository reference into (owner, name).

    Accepts "owner/name", "github.com/owner/name" and full https URLs, with or
    without a trailing ".git" or extra path segments.

    Raises:
        ValueError: If no owner and name can be extracted.
    """
    text = value.strip()
    if "://" in text:
        text = urlparse(text).path
    elif text.startswith("github.com/"):
        text = text[len("github.com/"):]

    parts = [p for p in text.strip("/").split("/") if p]
    if len(parts) < 2:
        raise ValueError(f"Not a valid repository: {value!r} (expected owner/repo)")

    owner, name = parts[0], parts[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not owner or not name:
        raise ValueError(f"Not a valid repository: {value!r} (expected owner/repo)")
    return owner, name


def print_not_authenticated_err(e: NotAuthenticatedError) -> None:
    """
    Displays a user-friendly error message when no GitHub token is available.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Not Signed In[/bold red]")
    pr(e.message)
    pr(
        "\n[yellow]Quick Fix:[/yellow] Set GITHUB_TOKEN, pass --token, or run "
        "`vulnlens --configure`."
    )
    raise typer.Exit(code=1) from e


def print_source_err(e: SourceUnavailableError) -> None:
    """
    Displays a user-friendly error message when the GitHub API cannot be reached.

    Args:
        e (SourceUnavailableError): The exception that was raised, containing the
            requested URL and status code when known.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]GitHub Error[/bold red]")
    pr(f"The app couldn't reach the GitHub API: {e.message}")
    if e.url:
        pr(f"URL: [yellow]{e.url}[/yellow]")
    if e.status_code in (401, 403):
        pr("\n[yellow]Quick Fix:[/yellow] Check that your token is valid and has repo access.")
    elif e.original_exception:
        pr(f"\nTechnical details: {e.original_exception}")
    raise typer.Exit(code=1) from e


def print_file_io_err(e: FileIOError) -> None:
    """
    Displays a user-friendly error message for file I/O operation failures.

    Prints formatted error messages to inform the user about file read/write
    issues, including the file path and diagnostic information for troubleshooting.

    Args:
        e (FileIOError): The exception that was raised, containing error details
            and file path information.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]File I/O Error[/bold red]")
    pr(f"The app encountered an error while working with files: {e.message}")
    if e.file_path:
        pr(f"File path: [yellow]{e.file_path}[/yellow]")

    pr("\n[yellow]Quick Fix:[/yellow] Check file permissions and available disk space.")
    if e.original_exception:
        pr(f"\nTechnical details: {e.original_exception}")

    raise typer.Exit(code=1) from e


def print_unexpected_err(e: Exception) -> None:
    """
    Displays a user-friendly error message for unexpected errors.

    This catch-all handler ensures that any unhandled exceptions are presented
    to the user in a friendly way, rather than showing a raw Python stack trace.

    Args:
        e (Exception): The unexpected exception that was raised.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Unexpected Error[/bold red]")
    pr("An unexpected error occurred while processing your request.")
    pr(f"\n[yellow]Error Type:[/yellow] {type(e).__name__}")
    pr(f"[yellow]Error Message:[/yellow] {str(e)}")

    pr("\n[yellow]What to do:[/yellow]")
    pr("1. Check that the repository exists and your token can read it")
    pr("2. Check that the classifier is reachable (`vulnlens health`)")
    pr("3. Try running the command again with --verbose")

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Error Type: {type(e).__name__}")
    pr(f"Error Message: {e}")
    if hasattr(e, "__cause__") and e.__cause__:
        pr(f"Caused by: {e.__cause__}")

    raise typer.Exit(code=1) from e


def validate_github_token(token: str) -> bool:
    """Check a GitHub token against `GET /user`."""

    async def _validate():
        async with GitHubRepositorySource(Session(provider_token=token)) as source:
            return await source.validate_token()

    return asyncio.run(_validate())


def edit_config() -> None:
    """
    Interactively edits the settings with the current values prepopulated and
    saves them. A newly entered GitHub token is validated first. On cancel or
    invalid input, exits.
    """
    current = get_settings()
    updated = edit_settings(current)

    if updated.github_token and updated.github_token != current.github_token:
        if not validate_github_token(updated.github_token):
            pr("[red]Error:[/red] Invalid GitHub token. Settings were not saved.")
            raise typer.Exit(code=1)
        pr("[green]GitHub token verified.[/green]")

    try:
        save_config(updated)
    except FileIOError as e:
        print_file_io_err(e)
    except OSError as e:
        pr("[red]Error:[/red] Could not save config.")
        pr(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=1) from e

    pr("[green]Config saved.[/green]\n")


if __name__ == "__main__":
    app()
