"""Configuration management for gitarchive."""

import os
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from .platform import get_home_dir, normalize_path, validate_git_availability

load_dotenv()  # Load .env file if it exists

SETTINGS_FILE_NAME = "git_archive.json"
CACHE_FILE_NAME = "git_archive.txt"
NOTIFY_FILE_NAME = "git_archive_notify.txt"


class SettingsLocation(Enum):
    """Where the per-repository settings file lives."""
    REPO_ROOT = "repo_root"
    METADATA_DIR_WITH_FALLBACK = "metadata_dir_with_fallback"


class NotificationNaming(Enum):
    """How the walk report file is named."""
    FIXED = "fixed"
    TIMESTAMPED = "timestamped"


@dataclass(frozen=True)
class ArchivePolicy:
    """Differences between deployments, kept in one place."""
    settings_location: SettingsLocation = SettingsLocation.METADATA_DIR_WITH_FALLBACK
    notification_naming: NotificationNaming = NotificationNaming.FIXED


@dataclass
class Config:
    """Configuration class for gitarchive with validation and defaults."""

    # Roots searched for repositories carrying a settings file
    folders: List[Path] = field(default_factory=list)

    # Files
    notify_file: Path = field(default_factory=lambda: get_home_dir() / NOTIFY_FILE_NAME)
    cache_file: Path = field(default_factory=lambda: get_home_dir() / CACHE_FILE_NAME)

    policy: ArchivePolicy = field(default_factory=ArchivePolicy)

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.folders = [normalize_path(folder) for folder in self.folders]
        self.notify_file = normalize_path(self.notify_file)
        self.cache_file = normalize_path(self.cache_file)

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_log_levels:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {valid_log_levels}")
        self.log_level = self.log_level.upper()


def load_configuration() -> Config:
    """Load configuration from environment variables with sensible defaults."""
    try:
        folders = [
            Path(entry) for entry in os.getenv("GITARCHIVE_FOLDERS", "").split(os.pathsep)
            if entry.strip()
        ]
        policy = ArchivePolicy(
            settings_location=SettingsLocation(
                os.getenv("GITARCHIVE_SETTINGS_LOCATION", SettingsLocation.METADATA_DIR_WITH_FALLBACK.value)
            ),
            notification_naming=NotificationNaming(
                os.getenv("GITARCHIVE_NOTIFICATION_NAMING", NotificationNaming.FIXED.value)
            )
        )
        return Config(
            folders=folders,
            notify_file=Path(os.getenv("GITARCHIVE_NOTIFY_FILE", str(get_home_dir() / NOTIFY_FILE_NAME))),
            cache_file=Path(os.getenv("GITARCHIVE_CACHE_FILE", str(get_home_dir() / CACHE_FILE_NAME))),
            policy=policy,
            log_level=os.getenv("GITARCHIVE_LOG_LEVEL", "INFO")
        )
    except (ValueError, TypeError) as e:
        raise ValueError(f"Configuration error: {e}")


def validate_configuration(config: Config) -> List[str]:
    """Validate configuration and return any errors or warnings."""
    errors = []

    git_available, git_error = validate_git_availability()
    if not git_available:
        errors.append(f"ERROR: {git_error}")

    if not config.folders:
        errors.append("WARNING: No repository folders configured (GITARCHIVE_FOLDERS)")
    for folder in config.folders:
        if not folder.is_dir():
            errors.append(f"WARNING: Repository folder does not exist: {folder}")

    if not config.notify_file.parent.is_dir():
        errors.append(f"WARNING: Notification directory does not exist: {config.notify_file.parent}")

    if errors:
        logging.getLogger('gitarchive.config').debug(f"Configuration issues: {errors}")

    return errors
