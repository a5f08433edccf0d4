"""
Local file access for the settings document, quick-scan input and JSONL reports.

Callers depend on the `FileReader` / `FileWriter` protocols; tests pass the
in-memory mocks at the bottom of this module instead of touching the disk.
"""

import json
import os
from pathlib import Path
from typing import Protocol

from core.exceptions import FileReadError, FileWriteError, InvalidFilePathError


class FileReader(Protocol):
    def read_file(self, file_path: Path) -> str:
        """Return the UTF-8 text of `file_path`, or "" if there is no such file."""


class FileWriter(Protocol):
    def write_file(self, data: str, mode: str = "w") -> None:
        """Write `data`, truncating ("w") or appending ("a")."""

    def append_jsonl_line(self, data: dict) -> None:
        """Append `data` as one JSON line."""


class FilesystemFileReader:
    def read_file(self, file_path: Path) -> str:
        """
        Read a source or settings file.

        Undecodable bytes are dropped, so a stray Latin-1 character in a PHP
        file does not stop it from being scanned.

        Raises:
            FileReadError: If the file exists but cannot be read.
        """
        if not file_path.is_file():
            return ""

        try:
            with file_path.open("r", encoding="utf-8", errors="ignore") as f:
                return f.read()
        except OSError as e:
            raise FileReadError(
                message=f"Failed to read file: {file_path}",
                file_path=str(file_path),
                original_exception=e,
            ) from e


class FilesystemFileWriter:
    """Writes to one fixed path, usually obtained through `from_path`."""

    def __init__(self, file_path: Path):
        self.file_path = file_path

    @classmethod
    def from_path(cls, file_path: Path) -> "FilesystemFileWriter":
        """
        Raises:
            InvalidFilePathError: If the parent directory is missing or not
                writable, so a long scan does not end with an unwritable report.
        """
        parent = file_path.parent
        if not parent.is_dir():
            raise InvalidFilePathError(
                message=f"Parent directory does not exist: {parent}",
                file_path=str(file_path),
            )
        if not os.access(parent, os.W_OK):
            raise InvalidFilePathError(
                message=f"Parent directory is not writable: {parent}",
                file_path=str(file_path),
            )
        return cls(file_path)

    def write_file(self, data: str, mode: str = "w") -> None:
        self._write(data, mode)

    def append_jsonl_line(self, data: dict) -> None:
        self._write(json.dumps(data) + "\n", "a")

    def _write(self, text: str, mode: str) -> None:
        try:
            with open(self.file_path, mode, encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e


class MockFileReader:
    """Serves the same `content` for every path and records the paths read."""

    def __init__(self, content: str = ""):
        self.content = content
        self.read_file_calls: list[Path] = []

    def read_file(self, file_path: Path) -> str:
        self.read_file_calls.append(file_path)
        return self.content


class MockFileWriter:
    """Keeps written text and JSONL records in memory."""

    def __init__(self) -> None:
        self.write_file_calls: list[tuple[str, str]] = []
        self.written_data = ""
        self.written_jsonl_lines: list[dict] = []

    def write_file(self, data: str, mode: str = "w") -> None:
        self.write_file_calls.append((data, mode))
        self.written_data = data if mode == "w" else self.written_data + data

    def append_jsonl_line(self, data: dict) -> None:
        self.written_jsonl_lines.append(data)
