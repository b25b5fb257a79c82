"""Per-repository settings file (``git_archive.json``)."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .config import SETTINGS_FILE_NAME, SettingsLocation
from .errors import SettingsError
from .platform import write_text_atomic

ARCHIVE_DISABLED = "-"
METADATA_DIR_NAME = ".git"
DEFAULT_BRANCHES = ("master",)


@dataclass(frozen=True)
class RepositorySettings:
    """Archive destination and branches to snapshot for one repository."""
    archive_folder: str
    branches: Set[str] = field(default_factory=set)

    @property
    def archiving_disabled(self) -> bool:
        return self.archive_folder == ARCHIVE_DISABLED

    def to_json(self) -> str:
        return json.dumps(
            {"ArchiveFolder": self.archive_folder, "Branches": sorted(self.branches)},
            indent=2,
            ensure_ascii=False
        )

    @classmethod
    def from_json(cls, text: str) -> "RepositorySettings":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("settings must be a JSON object")
        archive_folder = data.get("ArchiveFolder")
        if not isinstance(archive_folder, str) or not archive_folder:
            raise ValueError("ArchiveFolder must be a non-empty string")
        branches = data.get("Branches") or []
        if not isinstance(branches, list) or not all(isinstance(b, str) for b in branches):
            raise ValueError("Branches must be a list of branch names")
        return cls(archive_folder=archive_folder, branches=set(branches))


def candidate_settings_files(repo_root: Path, location: SettingsLocation) -> List[Path]:
    """Settings file locations for ``repo_root``, most preferred first."""
    root_file = repo_root / SETTINGS_FILE_NAME
    if location == SettingsLocation.METADATA_DIR_WITH_FALLBACK:
        return [repo_root / METADATA_DIR_NAME / SETTINGS_FILE_NAME, root_file]
    return [root_file]


def find_settings_file(repo_root: Path, location: SettingsLocation) -> Optional[Path]:
    for candidate in candidate_settings_files(repo_root, location):
        if candidate.is_file():
            return candidate
    return None


def load_settings(repo_root: Path, location: SettingsLocation) -> RepositorySettings:
    """
    Load the settings of the repository rooted at ``repo_root``.

    Raises:
        SettingsError: if no settings file exists or it cannot be parsed
    """
    settings_file = find_settings_file(repo_root, location)
    if settings_file is None:
        raise SettingsError(f"No {SETTINGS_FILE_NAME} found for {repo_root}")

    try:
        settings = RepositorySettings.from_json(settings_file.read_text(encoding='utf-8'))
    except (ValueError, OSError) as e:
        raise SettingsError(f"Invalid settings file {settings_file}: {e}") from e

    logging.getLogger('gitarchive.settings').debug(f"Loaded settings from {settings_file}")
    return settings


def save_settings(repo_root: Path, location: SettingsLocation, settings: RepositorySettings) -> Path:
    """Write settings back where they were found, or to the preferred location."""
    settings_file = find_settings_file(repo_root, location)
    if settings_file is None:
        settings_file = candidate_settings_files(repo_root, location)[0]
        if not settings_file.parent.is_dir():
            # Not a git working copy yet; keep the file beside the sources
            settings_file = repo_root / SETTINGS_FILE_NAME

    write_text_atomic(settings_file, settings.to_json() + "\n")
    logging.getLogger('gitarchive.settings').info(f"Saved settings to {settings_file}")
    return settings_file


def create_settings(repo_root: Path, location: SettingsLocation, archive_folder: str,
                    branches: Optional[Iterable[str]] = None) -> RepositorySettings:
    """Create (or replace) the settings of a repository."""
    settings = RepositorySettings(
        archive_folder=archive_folder,
        branches=set(branches) if branches is not None else set(DEFAULT_BRANCHES)
    )
    save_settings(repo_root, location, settings)
    return settings


def set_archive_folder(repo_root: Path, location: SettingsLocation, archive_folder: str) -> RepositorySettings:
    settings = load_settings(repo_root, location)
    updated = RepositorySettings(archive_folder=archive_folder, branches=set(settings.branches))
    save_settings(repo_root, location, updated)
    return updated


def add_branch(repo_root: Path, location: SettingsLocation, branch: str) -> RepositorySettings:
    settings = load_settings(repo_root, location)
    updated = RepositorySettings(archive_folder=settings.archive_folder, branches=settings.branches | {branch})
    save_settings(repo_root, location, updated)
    return updated
