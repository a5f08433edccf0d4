"""
Progress bar creation and management module using Rich.

This module provides utilities for creating and managing the scan progress bar.
Scan progress is tracked as an absolute percentage (0..100) plus the path of the
file currently being analyzed, so the bar is always created with a total of 100
and updated with `completed=` rather than relative advances. The module supports
different progress states (in progress, complete, warning, error) with color
coding.
"""

from enum import StrEnum
from typing import Optional

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressState(StrEnum):
    """
    Enumeration of progress bar states with associated color codes.

    Attributes:
        IN_PROGRESS: Magenta color for tasks currently being processed.
        COMPLETE: Green color for successfully completed tasks.
        WARNING: Yellow color for tasks that finished with skipped work.
        ERROR: Red color for tasks that have encountered errors.
    """

    IN_PROGRESS = "magenta"
    COMPLETE = "green"
    WARNING = "yellow"
    ERROR = "red"


def create_progress() -> Progress:
    """
    Creates and configures a Rich Progress instance for repository scans.

    The bar shows a spinner, the description, the bar itself, the percentage,
    the elapsed time and, on the right, the file currently being analyzed
    (taken from the task's `file` field).
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        TextColumn("[cyan]{task.fields[file]}"),
    )


def create_task(progress: Progress, description: str, total: Optional[int]) -> TaskID:
    """Add a task in the IN_PROGRESS state with an empty current-file field."""
    return progress.add_task(
        f"[{ProgressState.IN_PROGRESS}]{description}", total=total, file=""
    )


def update_progress(
    progress: Progress,
    task: TaskID,
    progress_state: Optional[ProgressState] = None,
    completed: Optional[float] = None,
    description: Optional[str] = None,
    file: Optional[str] = None,
) -> None:
    """
    Updates a progress task with new state, completion, description or file.

    Note: If `progress_state` is provided, `description` must also be provided,
    and vice versa, so the description is always styled with a state color.

    Raises:
        ValueError: If progress_state and description are not both provided
            or both omitted.
    """
    if bool(progress_state) != bool(description):
        raise ValueError("progress_state and description must be provided together.")

    fields: dict = {}
    if description:
        fields["description"] = f"[{progress_state}]{description}"
    if file is not None:
        fields["file"] = file

    progress.update(task, completed=completed, **fields)
