"""
Incremental archiving of tags and tracked branch heads.

Tag snapshots are written once: ``<folder>/<repo>-<tag>.zip`` existing means
done, forever. Branch snapshots ``<folder>/<repo>-<branch>-latest.zip`` carry a
``.ref`` marker holding the commit they were taken from; they are rewritten
whenever the branch head moves away from that commit.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from .errors import GitCommandFailure, LogParseError
from .git.repository import GitRepository
from .git.runner import GitCommandResult
from .platform import write_text_atomic
from .settings import RepositorySettings

ARCHIVE_SUFFIX = ".zip"
MARKER_SUFFIX = ".ref"
INDENT = "    "


def _file_component(ref: str) -> str:
    # branch and tag names may contain path separators
    return ref.replace("/", "-").replace("\\", "-")


def tag_archive_path(archive_folder: Path, repo_name: str, tag: str) -> Path:
    return archive_folder / f"{repo_name}-{_file_component(tag)}{ARCHIVE_SUFFIX}"


def branch_archive_base(archive_folder: Path, repo_name: str, branch: str) -> Path:
    return archive_folder / f"{repo_name}-{_file_component(branch)}-latest"


def read_marker(marker_file: Path) -> str:
    """Commit id recorded by the previous branch archive; empty if none."""
    if not marker_file.exists():
        return ""
    lines = marker_file.read_text(encoding='utf-8').splitlines()
    return lines[0].strip() if lines else ""


def write_marker(marker_file: Path, commit_id: str) -> None:
    write_text_atomic(marker_file, commit_id)


def _failure_lines(heading: str, result: GitCommandResult) -> List[str]:
    return [f"{INDENT}{heading}"] + [f"{INDENT}{line}" for line in result.stderr if line.strip()]


class ArchiveDecisionEngine:
    """Decides, per tag and per tracked branch, whether a snapshot is due."""

    def __init__(self, repository: GitRepository, repo_root: Path):
        self.repository = repository
        self.repo_root = repo_root
        self.repo_name = repo_root.name
        self.logger = logging.getLogger('gitarchive.archive')

    def run(self, settings: RepositorySettings) -> List[str]:
        """Archive everything that is missing or outdated; return findings."""
        if settings.archiving_disabled:
            self.logger.warning(f"[{self.repo_name}] archive folder not configured")
            return [f"{INDENT}archive folder not configured"]

        archive_folder = self.resolve_archive_folder(settings.archive_folder)
        if not archive_folder.is_dir():
            self.logger.error(f"[{self.repo_name}] archive folder does not exist: {archive_folder}")
            return [f"{INDENT}archive folder does not exist: {archive_folder}"]

        findings = self.archive_tags(archive_folder)
        findings.extend(self.archive_branches(archive_folder, sorted(settings.branches)))
        return findings

    def resolve_archive_folder(self, archive_folder: str) -> Path:
        """Absolute archive folder; relative settings are relative to the repository root."""
        return (self.repo_root / Path(archive_folder).expanduser()).resolve()

    def archive_tags(self, archive_folder: Path) -> List[str]:
        findings = []
        for tag in self.repository.tags():
            outfile = tag_archive_path(archive_folder, self.repo_name, tag)
            if outfile.exists():
                continue

            result = self.repository.archive(outfile, tag)
            if result.ok:
                self.logger.info(f"[{self.repo_name}] archived tag {tag} to {outfile}")
            else:
                self.logger.error(f"[{self.repo_name}] archive of tag {tag} failed")
                findings.extend(_failure_lines(f"archive {tag} failed.", result))
        return findings

    def archive_branches(self, archive_folder: Path, branches: Iterable[str]) -> List[str]:
        findings = []
        for branch in branches:
            base = branch_archive_base(archive_folder, self.repo_name, branch)
            outfile = base.with_name(base.name + ARCHIVE_SUFFIX)
            marker = base.with_name(base.name + MARKER_SUFFIX)

            previous = read_marker(marker)
            try:
                commit = self.repository.head_commit(branch)
            except (GitCommandFailure, LogParseError) as e:
                self.logger.error(f"[{self.repo_name}] cannot resolve branch {branch}: {e}")
                findings.append(f"{INDENT}branch {branch} not found.")
                continue

            if previous == commit:
                self.logger.debug(f"[{self.repo_name}] branch {branch} already archived at {commit}")
                continue

            result = self.repository.archive(outfile, branch)
            if not result.ok:
                self.logger.error(f"[{self.repo_name}] archive of branch {branch} failed")
                findings.extend(_failure_lines(f"archive {branch} failed.", result))
                continue

            write_marker(marker, commit)
            self.logger.info(f"[{self.repo_name}] archived branch {branch} at {commit}")
        return findings
