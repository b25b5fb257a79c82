"""Cross-platform compatibility utilities for gitarchive."""

import os
import platform
import shutil
import subprocess
import tempfile
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class PlatformType(Enum):
    """Supported platform types."""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    UNKNOWN = "unknown"


def detect_platform() -> PlatformType:
    """Detect the current platform."""
    system = platform.system().lower()

    if system == "windows":
        return PlatformType.WINDOWS
    elif system == "darwin":
        return PlatformType.MACOS
    elif system == "linux":
        return PlatformType.LINUX
    else:
        return PlatformType.UNKNOWN


def normalize_path(path: Union[str, Path]) -> Path:
    """
    Normalize a path for the current platform.

    Args:
        path: Path to normalize

    Returns:
        Normalized Path object
    """
    if isinstance(path, str):
        path = Path(path)

    # Expand user home directory (~) first, then resolve to absolute path
    return path.expanduser().resolve()


def get_home_dir() -> Path:
    """Directory holding the user-scoped files (staleness cache, reports)."""
    return Path.home()


def get_git_executable() -> str:
    """
    Get the Git executable name for the current platform.

    Returns:
        Git executable name
    """
    if detect_platform() == PlatformType.WINDOWS:
        return "git.exe"
    return "git"


def validate_git_availability() -> tuple[bool, Optional[str]]:
    """
    Validate that Git is available on the current platform.

    Returns:
        Tuple of (is_available, error_message)
    """
    git_cmd = get_git_executable()

    if shutil.which(git_cmd) is None:
        return False, f"Git executable '{git_cmd}' not found"

    try:
        result = subprocess.run(
            [git_cmd, "--version"],
            capture_output=True,
            text=True,
            timeout=10
        )
    except subprocess.TimeoutExpired:
        return False, "Git command timed out"
    except OSError as e:
        return False, f"Error checking Git availability: {e}"

    if result.returncode != 0:
        return False, f"Git command failed: {result.stderr}"
    return True, None


def create_secure_temp_file(directory: Path, suffix: str = '.tmp') -> tuple[int, Path]:
    """
    Create a secure temporary file in a cross-platform way.

    Args:
        directory: Directory to create the temp file in
        suffix: File suffix

    Returns:
        Tuple of (file_descriptor, file_path)
    """
    directory.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(dir=str(directory), suffix=suffix)
    return fd, Path(temp_path)


def write_text_atomic(path: Path, content: str) -> None:
    """
    Replace ``path`` with ``content`` through a temp file and rename.

    Readers never observe a half-written file; a crash leaves either the old
    or the new content in place.
    """
    fd, temp_file = create_secure_temp_file(path.parent, suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_file, path)
    except BaseException:
        temp_file.unlink(missing_ok=True)
        raise
