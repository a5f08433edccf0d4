"""
Comprehensive tests for the selection module using pytest.

Tests cover:
- is_eligible: blob kind, supported extensions, excluded path substrings
- is_priority: priority path substrings
- select_candidates: filtering, two-tier stable ordering, capping, purity
- with_max_candidates: copying heuristics with a new cap
"""

import pytest

from constants import SELECTION_HEURISTICS
from core.models import FileKind, RepositoryFile
from core.selection import (
    is_eligible,
    is_priority,
    select_candidates,
    with_max_candidates,
)


def blob(path: str) -> RepositoryFile:
    return RepositoryFile(path, FileKind.BLOB, f"ref:{path}")


def paths(files) -> list[str]:
    return [f.path for f in files]


# ============================================================================
# Tests for is_eligible
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "path",
    ["app.js", "ui/App.jsx", "src/main.ts", "c.tsx", "x.php", "page.html", "v.vue", "s.py"],
)
def test_is_eligible_accepts_supported_extensions(path):
    """Blobs with a supported extension outside excluded paths are eligible."""
    assert is_eligible(blob(path), SELECTION_HEURISTICS)


@pytest.mark.unit
@pytest.mark.parametrize("path", ["README.md", "style.css", "Makefile", "data.json"])
def test_is_eligible_rejects_unsupported_extensions(path):
    assert not is_eligible(blob(path), SELECTION_HEURISTICS)


@pytest.mark.unit
@pytest.mark.parametrize(
    "path",
    [
        "node_modules/lib/index.js",
        "vendor/autoload.php",
        "tests/login.php",
        "src/app.test.js",
        "dist/bundle.js",
    ],
)
def test_is_eligible_rejects_excluded_substrings(path):
    """Excluded substrings match anywhere in the path, not only directory names."""
    assert not is_eligible(blob(path), SELECTION_HEURISTICS)


@pytest.mark.unit
def test_is_eligible_rejects_trees():
    assert not is_eligible(RepositoryFile("src.js", FileKind.TREE), SELECTION_HEURISTICS)


@pytest.mark.unit
def test_is_eligible_extension_match_is_case_sensitive():
    assert not is_eligible(blob("LEGACY.PHP"), SELECTION_HEURISTICS)


@pytest.mark.unit
@pytest.mark.parametrize("path", ["src/.js", ".php", "lib/jquery.min.js"])
def test_is_eligible_matches_raw_path_suffix(path):
    """Dotfile names and multi-dot names are matched on how the path ends."""
    assert is_eligible(blob(path), SELECTION_HEURISTICS)


# ============================================================================
# Tests for is_priority
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize("path", ["index.js", "auth/login.ts", "lib/db.php"])
def test_is_priority_matches_markers(path):
    assert is_priority(blob(path), SELECTION_HEURISTICS)


@pytest.mark.unit
def test_is_priority_no_marker():
    assert not is_priority(blob("src/utils.js"), SELECTION_HEURISTICS)


# ============================================================================
# Tests for select_candidates
# ============================================================================


@pytest.mark.unit
def test_select_candidates_filters_and_prioritizes():
    """Priority files move ahead; excluded and unsupported files are dropped."""
    files = [
        blob("src/utils.js"),
        blob("node_modules/x/index.js"),
        blob("src/login.php"),
        blob("README.md"),
    ]

    assert paths(select_candidates(files)) == ["src/login.php", "src/utils.js"]


@pytest.mark.unit
def test_select_candidates_is_stable_within_tiers():
    files = [
        blob("b.js"),
        blob("index.html"),
        blob("a.js"),
        blob("api.php"),
        blob("c.ts"),
    ]

    assert paths(select_candidates(files)) == [
        "index.html",
        "api.php",
        "b.js",
        "a.js",
        "c.ts",
    ]


@pytest.mark.unit
def test_select_candidates_drops_directories():
    files = [RepositoryFile("src", FileKind.TREE), blob("src/a.js")]

    assert paths(select_candidates(files)) == ["src/a.js"]


@pytest.mark.unit
def test_select_candidates_caps_after_prioritizing():
    """The cap keeps priority files even if they were listed last."""
    files = [blob(f"lib/m{i}.js") for i in range(60)] + [blob("login.js")]

    selected = select_candidates(files)

    assert len(selected) == 50
    assert selected[0].path == "login.js"
    assert selected[-1].path == "lib/m48.js"


@pytest.mark.unit
def test_select_candidates_respects_custom_cap():
    files = [blob(f"m{i}.js") for i in range(5)]

    assert len(select_candidates(files, with_max_candidates(2))) == 2


@pytest.mark.unit
@pytest.mark.parametrize("cap", [0, -3])
def test_select_candidates_non_positive_cap_selects_nothing(cap):
    assert select_candidates([blob("a.js")], with_max_candidates(cap)) == ()


@pytest.mark.unit
def test_select_candidates_empty_listing():
    assert select_candidates([]) == ()


@pytest.mark.unit
def test_select_candidates_is_deterministic():
    files = [blob("z.js"), blob("index.php"), blob("a.ts")]

    assert select_candidates(files) == select_candidates(list(files))


@pytest.mark.unit
def test_select_candidates_accepts_generators():
    files = (blob(p) for p in ["a.js", "b.md"])

    assert paths(select_candidates(files)) == ["a.js"]


# ============================================================================
# Tests for with_max_candidates
# ============================================================================


@pytest.mark.unit
def test_with_max_candidates_copies_heuristics():
    updated = with_max_candidates(7)

    assert updated["max_candidates"] == 7
    assert SELECTION_HEURISTICS["max_candidates"] == 50
    assert updated["supported_extensions"] == SELECTION_HEURISTICS["supported_extensions"]
