"""
Interactive user prompts for the VulnLens CLI application.

This module provides the interactive terminal flows used when information is not
supplied on the command line:

1. Repository Selection: lists the user's GitHub repositories (optionally
   filtered) and lets them pick one to scan.
2. Language Selection: picks the classifier language for a quick scan of
   pasted code, or a language filter for the repository list.
3. Settings: edits the persisted settings with the current values prefilled.
4. Confirmations before starting a scan and before deleting history entries.

The module uses the `inquirer` library for interactive prompts and `rich` for
formatted terminal output.
"""

import inquirer  # type: ignore
from inquirer.themes import GreenPassion  # type: ignore
from rich import print as pr
import typer

from core.config import Settings
from core.models import GitHubRepo
from models import ClassifierBackend, SupportedLanguage


def make_repository_selection(repos: list[GitHubRepo]) -> GitHubRepo:
    """
    Prompts the user to pick one repository from `repos`.

    Raises:
        typer.Exit: If there is nothing to choose from or the prompt is cancelled.
    """
    if not repos:
        pr("[bold red]No repositories found.[/bold red]")
        raise typer.Exit()

    pr("\n[bold green]Select the repository to scan.[/bold green]")
    choices = [
        (f"{repo.full_name}  ({repo.language or 'Unknown'})", repo) for repo in repos
    ]
    questions = [
        inquirer.List(
            "repo",
            message="Hit [ENTER] to make your selection",
            choices=choices,
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        raise typer.Exit()

    return answers["repo"]


def make_language_filter_selection(languages: list[str]) -> str:
    """Prompts for one of `languages` ("All" disables filtering)."""
    questions = [
        inquirer.List(
            "language",
            message="Filter repositories by language",
            choices=languages,
            default="All",
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        raise typer.Exit()

    return answers["language"]


def make_language_selection() -> SupportedLanguage:
    """
    Prompts the user to select the language of a pasted snippet.

    Returns:
        SupportedLanguage: The enum member corresponding to the user's selection.
    """
    questions = [
        inquirer.List(
            "language",
            message="Which language is the code written in?",
            choices=[("JavaScript / TypeScript", SupportedLanguage.JS), ("PHP", SupportedLanguage.PHP)],
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        raise typer.Exit()

    return SupportedLanguage(answers["language"])


def confirm(message: str, default: bool = True) -> bool:
    answers = inquirer.prompt(
        [inquirer.Confirm("ok", message=message, default=default)],
        theme=GreenPassion(),
    )
    if not answers:
        raise typer.Exit()
    return bool(answers["ok"])


def edit_settings(current: Settings) -> Settings:
    """
    Prompts for every setting with the current values prefilled.

    Empty answers keep the current value for URLs and fall back to the
    defaults for the classifier backend.

    Raises:
        typer.Exit: If the prompt is cancelled or the candidate cap is not a
            positive integer.
    """
    pr("\n[bold green]Edit VulnLens settings.[/bold green]\n")

    questions = [
        inquirer.Password(
            "github_token",
            message="GitHub token (leave empty to keep the current one)",
        ),
        inquirer.List(
            "classifier_backend",
            message="Classifier backend",
            choices=[
                ("CodeBERT API", ClassifierBackend.API.value),
                ("LLM via litellm", ClassifierBackend.LLM.value),
            ],
            default=current.classifier_backend,
        ),
        inquirer.Text(
            "classifier_url",
            message="Classifier API base URL",
            default=current.classifier_url,
        ),
        inquirer.Text("model", message="LLM model name", default=current.model),
        inquirer.Password(
            "api_key", message="LLM API key (leave empty to keep the current one)"
        ),
        inquirer.Text(
            "supabase_url",
            message="History store URL (optional)",
            default=current.supabase_url,
        ),
        inquirer.Text(
            "supabase_key",
            message="History store anon key (optional)",
            default=current.supabase_key,
        ),
        inquirer.Text(
            "supabase_user_id",
            message="History store user id (optional)",
            default=current.supabase_user_id,
        ),
        inquirer.Password(
            "supabase_access_token",
            message="History store access token (leave empty to keep the current one)",
        ),
        inquirer.Text(
            "max_candidates",
            message="Maximum files analyzed per repository",
            default=str(current.max_candidates),
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        raise typer.Exit(code=1)

    try:
        max_candidates = int((answers.get("max_candidates") or "").strip())
    except ValueError:
        max_candidates = 0
    if max_candidates <= 0:
        pr("\n[bold][red]Error:[/bold] Maximum files must be a positive integer.")
        raise typer.Exit(code=1)

    return Settings(
        github_token=(answers.get("github_token") or "").strip() or current.github_token,
        classifier_backend=answers.get("classifier_backend") or current.classifier_backend,
        classifier_url=(answers.get("classifier_url") or "").strip() or current.classifier_url,
        classifier_urls=dict(current.classifier_urls),
        model=(answers.get("model") or "").strip() or current.model,
        api_key=(answers.get("api_key") or "").strip() or current.api_key,
        supabase_url=(answers.get("supabase_url") or "").strip(),
        supabase_key=(answers.get("supabase_key") or "").strip(),
        supabase_user_id=(answers.get("supabase_user_id") or "").strip(),
        supabase_access_token=(
            (answers.get("supabase_access_token") or "").strip()
            or current.supabase_access_token
        ),
        max_candidates=max_candidates,
    )
