"""
Repository scan orchestrator.

The orchestrator drives one repository scan end to end:

1.  **Fetching**: ask the repository source for the full file listing.
2.  **Ready**: narrow the listing to a bounded, prioritized candidate set with
    the file selector and wait for `run_scan()`.
3.  **Scanning**: for every candidate, strictly in order and one at a time,
    fetch its content, skip it if blank, otherwise analyze it and append a
    FileScanResult. Progress is recomputed after every candidate.
4.  **Complete**: the result sequence is final.

There is no failed state. The source and classifier degrade to empty results on
their own, and any other exception raised while handling a single file is
reported and the file dropped, so the run always reaches `complete`.

Run state is only ever replaced through `_update`, which refuses to apply a
change once the run has been cancelled or superseded by a newer `start()`. That
guard is what keeps a late-resolving fetch or analysis from touching state the
consumer has already walked away from. Consumers observe the run through
immutable `ScanRun` snapshots, either by polling `snapshot` or by registering a
listener with `subscribe`.
"""

import dataclasses
from collections.abc import Callable

from adapters.github import RepositorySource
from constants import SELECTION_HEURISTICS
from core.classifier import VulnerabilityClassifier
from core.exceptions import InvalidScanStateError
from core.models import FileScanResult, RepositoryFile, ScanRun, ScanState
from core.selection import select_candidates
from models import SelectionHeuristics
from utils import debug, warn

ScanListener = Callable[[ScanRun], None]


class _RunToken:
    """Identity of one run. `cancelled` only ever goes from False to True."""

    def __init__(self) -> None:
        self.cancelled = False


class ScanOrchestrator:
    """
    State machine for scanning a single repository.

    Attributes:
        source: Lists repository files and fetches their content.
        classifier: Analyzes the content of one file.
        heuristics: File selection configuration (extensions, exclusions,
            priority markers, candidate cap).
        keep_raw_code: Whether results retain the analyzed source for display.
    """

    def __init__(
        self,
        source: RepositorySource,
        classifier: VulnerabilityClassifier,
        heuristics: SelectionHeuristics = SELECTION_HEURISTICS,
        keep_raw_code: bool = True,
    ):
        self.source = source
        self.classifier = classifier
        self.heuristics = heuristics
        self.keep_raw_code = keep_raw_code
        self._run = ScanRun()
        self._token = _RunToken()
        self._listeners: list[ScanListener] = []

    @property
    def snapshot(self) -> ScanRun:
        return self._run

    @property
    def is_cancelled(self) -> bool:
        return self._token.cancelled

    def subscribe(self, listener: ScanListener) -> Callable[[], None]:
        """
        Register a listener called with a fresh snapshot after every change.

        Returns:
            A callable that unregisters the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def cancel(self) -> None:
        """
        Abandon the current run.

        No state changes are applied afterwards, including results of a fetch
        or analysis that is already in flight. A later `start()` begins a new run.
        """
        self._token.cancelled = True

    async def start(self, owner: str, repo_name: str) -> ScanRun:
        """
        Begin a new run: list the repository and select candidates.

        Any previous run, finished or not, is discarded.

        Returns:
            The snapshot after the transition to `ready` (or the last applied
            snapshot if the run was cancelled while listing).
        """
        self._token.cancelled = True
        token = _RunToken()
        self._token = token

        self._replace(
            token, ScanRun(state=ScanState.FETCHING, target=f"{owner}/{repo_name}")
        )

        try:
            files = await self.source.list_files(owner, repo_name)
        except Exception as e:  # noqa: BLE001
            warn(f"Listing {owner}/{repo_name} failed: {e}")
            files = []

        candidates = select_candidates(files, self.heuristics)
        debug(f"Selected {len(candidates)} of {len(files)} entries for analysis")
        self._update(token, state=ScanState.READY, candidates=candidates)
        return self._run

    async def run_scan(self) -> ScanRun:
        """
        Analyze every candidate in order.

        Returns:
            The final snapshot (state `complete`), or the last applied snapshot
            if the run was cancelled or superseded mid-way.

        Raises:
            InvalidScanStateError: If the orchestrator is not in state `ready`.
        """
        token = self._token
        if self._run.state is not ScanState.READY or token.cancelled:
            raise InvalidScanStateError(ScanState.READY.value, self._run.state.value)

        self._update(
            token,
            state=ScanState.SCANNING,
            results=(),
            progress_percent=0,
            current_file_path="",
        )

        candidates = self._run.candidates
        total = len(candidates)
        for index, candidate in enumerate(candidates):
            if not self._update(token, current_file_path=candidate.path):
                return self._run

            result = await self._scan_file(token, candidate)

            results = self._run.results
            if result is not None:
                results = (*results, result)
            if not self._update(
                token,
                results=results,
                progress_percent=round((index + 1) / total * 100),
            ):
                return self._run

        self._update(token, state=ScanState.COMPLETE, current_file_path="")
        return self._run

    async def scan_repository(self, owner: str, repo_name: str) -> ScanRun:
        """Convenience wrapper: `start` followed by `run_scan`."""
        await self.start(owner, repo_name)
        if self.is_cancelled:
            return self._run
        return await self.run_scan()

    async def _scan_file(
        self, token: _RunToken, candidate: RepositoryFile
    ) -> FileScanResult | None:
        """Fetch and analyze one candidate. None means "record nothing"."""
        try:
            content = await self.source.fetch_content(candidate.content_ref)
            if not content.strip():
                debug(f"Skipping blank file {candidate.path}")
                return None
            if not self._is_live(token):
                return None

            findings = await self.classifier.analyze(content, candidate.path)
        except Exception as e:  # noqa: BLE001
            # Per-file failures must not abort the rest of the run
            warn(f"Failed to scan {candidate.path}: {type(e).__name__}: {e}")
            return None

        return FileScanResult.from_findings(
            candidate.path,
            findings,
            raw_code=content if self.keep_raw_code else None,
        )

    def _is_live(self, token: _RunToken) -> bool:
        return token is self._token and not token.cancelled

    def _replace(self, token: _RunToken, run: ScanRun) -> bool:
        if not self._is_live(token):
            return False
        self._run = run
        for listener in list(self._listeners):
            listener(run)
        return True

    def _update(self, token: _RunToken, **changes) -> bool:
        """Apply `changes` to the current run. Returns False if the run is dead."""
        if not self._is_live(token):
            return False
        return self._replace(token, dataclasses.replace(self._run, **changes))
