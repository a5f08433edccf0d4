"""File selection and prioritization module.

This module narrows a repository's full file listing down to a bounded,
ordered set of candidates worth sending to the vulnerability classifier.

The selection process applies the configured heuristics in three steps:
- Filtering: only blobs with a supported extension, and no excluded directory
  substring (node_modules, vendor, test, dist, ...) anywhere in the path.
- Prioritization: files whose path mentions a high-value substring (index,
  login, php, ...) are moved ahead of the rest. This is a two-tier stable sort,
  so the listing order is preserved inside each tier.
- Capping: the ordered list is truncated to `max_candidates`.

Matching is plain case-sensitive substring/suffix matching. The heuristics are
data (see `constants.SELECTION_HEURISTICS`) so they can be tuned without touching
the scan orchestrator.
"""

from collections.abc import Iterable

from constants import SELECTION_HEURISTICS
from core.models import FileKind, RepositoryFile
from models import SelectionHeuristics


def select_candidates(
    all_files: Iterable[RepositoryFile],
    heuristics: SelectionHeuristics = SELECTION_HEURISTICS,
) -> tuple[RepositoryFile, ...]:
    """
    Select the files of a repository listing that should be analyzed.

    This is a pure function: the same input and heuristics always produce the
    same output sequence.

    Args:
        all_files: The raw repository listing, in listing order. Directory
            entries are accepted and dropped.
        heuristics: Extensions, excluded and priority substrings, and the cap.

    Returns:
        A tuple of at most `max_candidates` files. Priority-tier files come
        first; inside each tier the listing order is preserved.

    Example:
        >>> files = [
        ...     RepositoryFile("src/utils.js", FileKind.BLOB),
        ...     RepositoryFile("node_modules/x/index.js", FileKind.BLOB),
        ...     RepositoryFile("src/login.php", FileKind.BLOB),
        ... ]
        >>> [f.path for f in select_candidates(files)]
        ['src/login.php', 'src/utils.js']
    """
    kept = [f for f in all_files if is_eligible(f, heuristics)]

    # sorted() is stable, so ties keep listing order
    prioritized = sorted(kept, key=lambda f: 0 if is_priority(f, heuristics) else 1)

    return tuple(prioritized[: max(0, heuristics["max_candidates"])])


def is_eligible(file: RepositoryFile, heuristics: SelectionHeuristics) -> bool:
    """Return True for blobs with a supported extension outside excluded paths."""
    if file.kind != FileKind.BLOB:
        return False
    # plain suffix match on the raw path, so "src/.js" counts as a .js file
    if not file.path.endswith(tuple(heuristics["supported_extensions"])):
        return False
    return not any(
        excluded in file.path for excluded in heuristics["excluded_path_substrings"]
    )


def is_priority(file: RepositoryFile, heuristics: SelectionHeuristics) -> bool:
    return any(marker in file.path for marker in heuristics["priority_path_substrings"])


def with_max_candidates(
    max_candidates: int, heuristics: SelectionHeuristics = SELECTION_HEURISTICS
) -> SelectionHeuristics:
    """Copy `heuristics` with a different cap (used for the settings override)."""
    return {**heuristics, "max_candidates": max_candidates}
