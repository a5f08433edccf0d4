"""
Persistent user settings for VulnLens.

Settings live in a small JSON document at ~/.vulnlens/settings.json. Values from
the file are the defaults for every CLI invocation; command-line options and
environment variables (wired in main.py) take precedence over them.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from constants import (
    CONFIG_FILE,
    DEFAULT_CLASSIFIER_URL,
    DEFAULT_LLM_MODEL,
    SELECTION_HEURISTICS,
)
from core.exceptions import ConfigError
from core.file_io import FileReader, FileWriter, FilesystemFileReader, FilesystemFileWriter
from models import ClassifierBackend


@dataclass
class Settings:
    """
    User-editable configuration.

    Attributes:
        github_token: Bearer token for the GitHub REST API.
        classifier_backend: "api" for the HTTP classifier, "llm" for litellm.
        classifier_url: Default base URL of the classifier API.
        classifier_urls: Per-language base URL overrides (e.g. {"php": "..."}).
        model: Model name for the LLM backend.
        api_key: API key for the LLM backend.
        supabase_url: Base URL of the hosted history store.
        supabase_key: Anonymous API key of the history store.
        supabase_user_id: Id of the signed-in history store user.
        supabase_access_token: That user's access token, used for row-level
            security. Both are obtained out of band from the auth provider.
        max_candidates: Upper bound on files analyzed per repository scan.
    """

    github_token: str = ""
    classifier_backend: str = ClassifierBackend.API.value
    classifier_url: str = DEFAULT_CLASSIFIER_URL
    classifier_urls: dict[str, str] = field(default_factory=dict)
    model: str = DEFAULT_LLM_MODEL
    api_key: str = ""
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_user_id: str = ""
    supabase_access_token: str = ""
    max_candidates: int = SELECTION_HEURISTICS["max_candidates"]

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Build settings from a parsed JSON document, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    @property
    def history_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def get_config_file(
    config_file: Path = CONFIG_FILE, reader: FileReader | None = None
) -> dict:
    """
    Read the raw settings document.

    Returns:
        The parsed JSON object, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    reader = reader or FilesystemFileReader()
    content = reader.read_file(config_file)
    if not content.strip():
        return {}
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(file_path=str(config_file), original_exception=e) from e
    if not isinstance(data, dict):
        raise ConfigError(
            message="Settings file must contain a JSON object",
            file_path=str(config_file),
        )
    return data


def load_settings(
    config_file: Path = CONFIG_FILE, reader: FileReader | None = None
) -> Settings:
    return Settings.from_dict(get_config_file(config_file, reader))


def save_config(
    settings: Settings,
    config_file: Path = CONFIG_FILE,
    writer: FileWriter | None = None,
) -> None:
    """
    Persist settings as pretty-printed JSON.

    Raises:
        InvalidFilePathError: If the config directory is not writable.
        FileWriteError: If writing the file fails.
    """
    if writer is None:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        writer = FilesystemFileWriter.from_path(config_file)
    writer.write_file(json.dumps(asdict(settings), indent=2))
