"""
General utility functions for the CLI application.
"""

from rich.console import Console

console: Console = Console()
err_console: Console = Console(stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    """Enable or disable `debug` output for the rest of the process."""
    global _verbose
    _verbose = enabled


def debug(
    *values: object,
    sep: str = " ",
    end: str = "\n",
) -> None:
    """
    Print debug message with orange bold formatting.

    Messages are dropped unless verbose mode was enabled with `set_verbose(True)`
    (the `--verbose` CLI flag).

    Args:
        *values: Variable number of objects to print. All values are converted to strings.
        sep: Separator string between values. Defaults to a single space.
        end: String appended after the last value. Defaults to newline.
    """
    if not _verbose:
        return

    message = sep.join(str(v) for v in values)
    err_console.print(f"DEBUG: {message}", end=end, style="orange1", markup=False)


def warn(*values: object, sep: str = " ") -> None:
    """
    Print a warning in yellow to stderr.

    Used by fail-open code paths (unreachable source API, classifier outage)
    that degrade to empty results instead of raising.
    """
    message = sep.join(str(v) for v in values)
    err_console.print(f"⚠️  {message}", style="yellow", markup=False)
