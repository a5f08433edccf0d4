"""
Progress reporting protocol for decoupling UI from the scan orchestrator.

This module defines a protocol that allows progress reporting to be abstracted
away from the orchestrator, making it easier to test and swap implementations
(e.g., Rich UI or no-op behavior for tests). `ScanProgressListener` adapts the
orchestrator's snapshot stream to this protocol.
"""

from types import TracebackType
from typing import Protocol

from rich.progress import Progress, TaskID

from core.models import ScanRun, ScanState
from ui.progress import (
    ProgressState,
    create_progress,
    create_task,
    update_progress,
)


class ProgressDisplay(Protocol):
    """
    Protocol for progress reporting.

    The lifecycle is:
    1. Context manager entry (__enter__)
    2. on_start() - Called once at the beginning
    3. on_update() - Called multiple times during processing
    4. on_complete() - Called once at the end
    5. Context manager exit (__exit__)
    """

    def __enter__(self) -> "ProgressDisplay":
        """Enter the progress context."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the progress context."""

    def on_start(self, description: str, total: int | None) -> None:
        """
        Initialize progress reporting for a new task.

        Args:
            description: Initial description text to display.
            total: Total units of work. Scans always use 100 (percent).
        """

    def on_update(
        self, *, completed: int | None = None, current: str | None = None
    ) -> None:
        """
        Set the absolute completion and/or the item currently being processed.

        Args:
            completed: Absolute completed units. If None, unchanged.
            current: Label of the item in flight ("" clears it). If None, unchanged.
        """

    def on_complete(self, description: str, completed: int) -> None:
        """
        Mark the task as complete.

        Args:
            description: Final description text to display.
            completed: Final completed units.
        """


class RichProgressDisplay:
    """
    Rich UI implementation of ProgressDisplay.

    Must be used as a context manager: `with RichProgressDisplay() as rpd:`.
    """

    def __init__(self) -> None:
        """Initialize RPD. Progress instance is created lazily."""
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def __enter__(self) -> "RichProgressDisplay":
        self._progress = create_progress()
        self._progress.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._progress:
            self._progress.__exit__(exc_type, exc_val, exc_tb)

    def _require_progress(self) -> Progress:
        if not self._progress:
            raise RuntimeError(
                "RichProgressDisplay must be used as a context manager. "
                "Use: with RichProgressDisplay() as rpd:"
            )
        return self._progress

    def on_start(self, description: str, total: int | None) -> None:
        self._task = create_task(self._require_progress(), description, total=total)

    def on_update(
        self, *, completed: int | None = None, current: str | None = None
    ) -> None:
        """
        Raises:
            RuntimeError: If not used as a context manager or if on_start()
                was not called first.
            ValueError: If neither completed nor current is provided.
        """
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_update()")
        if completed is None and current is None:
            raise ValueError(
                "At least one of 'completed' or 'current' must be provided to on_update()"
            )
        update_progress(progress, self._task, completed=completed, file=current)

    def on_complete(self, description: str, completed: int) -> None:
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_complete()")
        update_progress(
            progress,
            self._task,
            ProgressState.COMPLETE,
            completed=completed,
            description=description,
            file="",
        )


class NoOpProgressDisplay:
    """
    No-op implementation of ProgressDisplay for testing.
    """

    def __enter__(self) -> "NoOpProgressDisplay":
        return self

    def __exit__(self, *args) -> None:
        """Exit the progress context (no-op)."""

    def on_start(self, description: str, total: int | None) -> None:
        """No-op: does nothing."""

    def on_update(
        self, *, completed: int | None = None, current: str | None = None
    ) -> None:
        """No-op: does nothing."""

    def on_complete(self, description: str, completed: int) -> None:
        """No-op: does nothing."""


class ScanProgressListener:
    """
    Orchestrator listener that drives a ProgressDisplay.

    Register with `orchestrator.subscribe(listener)` while the display's
    context is open. The task is started on the first `scanning` snapshot and
    completed on the `complete` snapshot; snapshots in between only forward the
    changed percentage or current file.
    """

    def __init__(self, display: ProgressDisplay):
        self.display = display
        self._started = False
        self._last_percent: int | None = None
        self._last_file: str | None = None

    def __call__(self, run: ScanRun) -> None:
        if run.state is ScanState.SCANNING:
            if not self._started:
                self.display.on_start(
                    f"Scanning {len(run.candidates)} files in {run.target}...",
                    total=100,
                )
                self._started = True
            completed = (
                run.progress_percent
                if run.progress_percent != self._last_percent
                else None
            )
            current = (
                run.current_file_path
                if run.current_file_path != self._last_file
                else None
            )
            if completed is not None or current is not None:
                self.display.on_update(completed=completed, current=current)
            self._last_percent = run.progress_percent
            self._last_file = run.current_file_path
        elif run.state is ScanState.COMPLETE and self._started:
            self.display.on_complete(
                f"✅ Analyzed {len(run.results)} files.", completed=100
            )
