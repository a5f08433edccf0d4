"""
Custom exception classes for the VulnLens CLI.

This module defines application-specific exceptions raised while talking to the
source-control API, the vulnerability classifier and the history store, and
while reading or writing local settings and report files. Exceptions carry
structured error information and diagnostic data to help with debugging and
error reporting.

Several of these exceptions never reach the user: the repository source and the
classifier client raise them internally and degrade to empty results, so that
one failing file or request cannot abort a scan.
"""

import os
from typing import Optional


class VulnLensError(Exception):
    """
    Base exception for all VulnLens errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing diagnostic information including
            exception type, details, and OS name.
    """

    default_message = "An unexpected VulnLens error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.original_exception = original_exception
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }


class SourceUnavailableError(VulnLensError):
    """
    Raised when the source-control API cannot serve a request.

    Covers network failures, authentication failures, non-success HTTP status
    codes and timeouts while listing a repository or fetching file content.

    Attributes:
        url: The URL that was being requested, if known.
        status_code: The HTTP status code returned, if a response was received.
    """

    default_message = "Source-control API is unavailable"

    def __init__(
        self,
        message: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message=message, original_exception=original_exception)
        self.url = url
        self.status_code = status_code


class ClassifierError(VulnLensError):
    """
    Raised when the vulnerability classifier call fails.

    Attributes:
        file_path: The file whose analysis failed.
        status_code: The HTTP status code returned, if a response was received.
    """

    default_message = "Vulnerability classifier request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        status_code: Optional[int] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message=message, original_exception=original_exception)
        self.file_path = file_path
        self.status_code = status_code


class UnsupportedFileError(VulnLensError):
    """
    Raised when a file's extension has no classifier language mapping.

    Attributes:
        file_path: The path of the unsupported file.
    """

    def __init__(self, file_path: str):
        super().__init__(message=f"Unsupported file type: {file_path}")
        self.file_path = file_path


class InvalidScanStateError(VulnLensError):
    """
    Raised when an orchestrator operation is invoked from the wrong state.

    Attributes:
        expected: The state the operation requires.
        actual: The state the orchestrator was in.
    """

    def __init__(self, expected: str, actual: str):
        super().__init__(
            message=f"Scan cannot proceed: expected state '{expected}', got '{actual}'"
        )
        self.expected = expected
        self.actual = actual


class NotAuthenticatedError(VulnLensError):
    """Raised when an operation needs a bearer token and none is available."""

    default_message = "No GitHub token available. Run `vulnlens --configure` first."


class HistoryStoreError(VulnLensError):
    """
    Raised when the hosted history store rejects or fails a request.

    Attributes:
        status_code: The HTTP status code returned, if a response was received.
    """

    default_message = "History store request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message=message, original_exception=original_exception)
        self.status_code = status_code


class FileIOError(VulnLensError):
    """
    Base exception for local file I/O errors (settings, reports).

    Attributes:
        file_path: The path of the file involved, if any.
    """

    default_message = "A file I/O error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message=message, original_exception=original_exception)
        self.file_path = file_path


class InvalidFilePathError(FileIOError):
    """Raised when a file path is unset or its parent directory is unusable."""

    default_message = "Invalid file path"


class FileReadError(FileIOError):
    """Raised when a file exists but cannot be read."""

    default_message = "Failed to read file"


class FileWriteError(FileIOError):
    """Raised when data cannot be written to a file."""

    default_message = "Failed to write file"


class ConfigError(VulnLensError):
    """
    Raised when the settings file exists but cannot be parsed.

    Attributes:
        file_path: The settings file path.
    """

    default_message = "Settings file is not valid JSON"

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message=message, original_exception=original_exception)
        self.file_path = file_path
