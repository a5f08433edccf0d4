"""
Comprehensive tests for the file_io module using pytest.

Tests cover:
- FilesystemFileReader: reading files, invalid UTF-8, I/O errors
- FilesystemFileWriter: factory method, writing files, appending JSONL
- MockFileReader: call tracking and configured content
- MockFileWriter: call tracking and data storage
"""

import json

import pytest

from core.exceptions import FileReadError, FileWriteError, InvalidFilePathError
from core.file_io import (
    FilesystemFileReader,
    FilesystemFileWriter,
    MockFileReader,
    MockFileWriter,
)


# ============================================================================
# Tests for FilesystemFileReader.read_file
# ============================================================================


@pytest.mark.unit
def test_read_file_success(tmp_path):
    """Should successfully read a text file."""
    file_path = tmp_path / "login.php"
    content = "<?php\necho $_GET['q'];\n"
    file_path.write_text(content, encoding="utf-8")

    assert FilesystemFileReader().read_file(file_path) == content


@pytest.mark.unit
def test_read_file_nonexistent(tmp_path):
    """Should return empty string for non-existent file."""
    assert FilesystemFileReader().read_file(tmp_path / "missing.json") == ""


@pytest.mark.unit
def test_read_file_directory(tmp_path):
    """Directories are treated like missing files."""
    assert FilesystemFileReader().read_file(tmp_path) == ""


@pytest.mark.unit
def test_read_file_invalid_utf8_ignored(tmp_path):
    file_path = tmp_path / "mixed.js"
    file_path.write_bytes(b"let a = 1;\xff\xfe\n")

    assert FilesystemFileReader().read_file(file_path) == "let a = 1;\n"


@pytest.mark.mock
def test_read_file_io_error(tmp_path, mocker):
    """Should raise FileReadError when I/O error occurs."""
    file_path = tmp_path / "settings.json"
    file_path.write_text("{}", encoding="utf-8")
    mocker.patch("pathlib.Path.open", side_effect=OSError("Permission denied"))

    with pytest.raises(FileReadError) as exc_info:
        FilesystemFileReader().read_file(file_path)

    assert "Failed to read file" in str(exc_info.value)
    assert exc_info.value.file_path == str(file_path)
    assert exc_info.value.original_exception is not None


# ============================================================================
# Tests for FilesystemFileWriter.from_path
# ============================================================================


@pytest.mark.unit
def test_from_path_success(tmp_path):
    file_path = tmp_path / "report.jsonl"

    writer = FilesystemFileWriter.from_path(file_path)

    assert writer.file_path == file_path


@pytest.mark.unit
def test_from_path_parent_not_exists(tmp_path):
    file_path = tmp_path / "missing" / "report.jsonl"

    with pytest.raises(InvalidFilePathError) as exc_info:
        FilesystemFileWriter.from_path(file_path)

    assert "Parent directory does not exist" in str(exc_info.value)
    assert exc_info.value.file_path == str(file_path)


@pytest.mark.mock
def test_from_path_parent_not_writable(tmp_path, mocker):
    mocker.patch("core.file_io.os.access", return_value=False)
    file_path = tmp_path / "report.jsonl"

    with pytest.raises(InvalidFilePathError) as exc_info:
        FilesystemFileWriter.from_path(file_path)

    assert "Parent directory is not writable" in str(exc_info.value)


# ============================================================================
# Tests for FilesystemFileWriter.write_file and append_jsonl_line
# ============================================================================


@pytest.mark.unit
def test_write_file_truncates(tmp_path):
    file_path = tmp_path / "out.txt"
    file_path.write_text("old content", encoding="utf-8")

    FilesystemFileWriter(file_path).write_file("new")

    assert file_path.read_text(encoding="utf-8") == "new"


@pytest.mark.unit
def test_write_file_append_mode(tmp_path):
    file_path = tmp_path / "out.txt"
    writer = FilesystemFileWriter(file_path)

    writer.write_file("a", mode="w")
    writer.write_file("b", mode="a")

    assert file_path.read_text(encoding="utf-8") == "ab"


@pytest.mark.mock
def test_write_file_os_error(tmp_path, mocker):
    mocker.patch("builtins.open", side_effect=OSError("disk full"))

    with pytest.raises(FileWriteError) as exc_info:
        FilesystemFileWriter(tmp_path / "out.txt").write_file("data")

    assert exc_info.value.original_exception is not None


@pytest.mark.unit
def test_append_jsonl_line(tmp_path):
    file_path = tmp_path / "report.jsonl"
    writer = FilesystemFileWriter(file_path)

    writer.append_jsonl_line({"type": "scan", "files": 2})
    writer.append_jsonl_line({"type": "file", "file_path": "a.js"})

    lines = file_path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line) for line in lines] == [
        {"type": "scan", "files": 2},
        {"type": "file", "file_path": "a.js"},
    ]


@pytest.mark.mock
def test_append_jsonl_line_os_error(tmp_path, mocker):
    mocker.patch("builtins.open", side_effect=OSError("disk full"))

    with pytest.raises(FileWriteError) as exc_info:
        FilesystemFileWriter(tmp_path / "r.jsonl").append_jsonl_line({"a": 1})

    assert exc_info.value.file_path == str(tmp_path / "r.jsonl")


# ============================================================================
# Tests for MockFileReader and MockFileWriter
# ============================================================================


@pytest.mark.unit
def test_mock_file_reader_serves_content(tmp_path):
    reader = MockFileReader("content")

    assert reader.read_file(tmp_path / "a") == "content"
    assert reader.read_file_calls == [tmp_path / "a"]


@pytest.mark.unit
def test_mock_file_reader_default_empty(tmp_path):
    assert MockFileReader().read_file(tmp_path / "a") == ""


@pytest.mark.unit
def test_mock_file_writer_tracks_calls():
    writer = MockFileWriter()

    writer.write_file("a")
    writer.write_file("b", mode="a")
    writer.append_jsonl_line({"x": 1})

    assert writer.write_file_calls == [("a", "w"), ("b", "a")]
    assert writer.written_data == "ab"
    assert writer.written_jsonl_lines == [{"x": 1}]
