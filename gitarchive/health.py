"""Health check of a single working copy."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .archive import INDENT, ArchiveDecisionEngine
from .config import Config
from .errors import GitCommandFailure
from .git.repository import GitRepository
from .platform import normalize_path
from .settings import METADATA_DIR_NAME, load_settings
from .staleness import STALE_AFTER, StalenessCache, StalenessTracker, local_now


def resolve_repository_root(directory: Path) -> Path:
    """Working copy root for ``directory``, stepping out of the metadata directory."""
    directory = normalize_path(directory)
    if directory.name == METADATA_DIR_NAME:
        return directory.parent
    return directory


class RepositoryHealthEvaluator:
    """
    Runs every check against one repository and collects the findings.

    The result is either empty (healthy) or the repository path followed by
    one indented line per problem. Reportable git failures become findings;
    settings and log parsing errors propagate to the caller.
    """

    def __init__(self, config: Config, cache: StalenessCache,
                 repository_factory: Callable[[Path], GitRepository] = GitRepository.at,
                 clock: Callable[[], datetime] = local_now):
        self.config = config
        self.tracker = StalenessTracker(cache, clock)
        self.repository_factory = repository_factory
        self.logger = logging.getLogger('gitarchive.health')

    def check(self, directory: Path) -> List[str]:
        root = resolve_repository_root(directory)
        repo_name = root.name
        self.logger.info(f"Check {root}")

        settings = load_settings(root, self.config.policy.settings_location)
        repository = self.repository_factory(root)

        findings = self._check_working_tree(repository, str(root))
        findings.extend(self._check_remotes(repository))
        findings.extend(ArchiveDecisionEngine(repository, root).run(settings))

        if not findings:
            self.logger.info(f"{repo_name} is healthy")
            return []
        return [str(root)] + findings

    def _check_working_tree(self, repository: GitRepository, repo_path: str) -> List[str]:
        try:
            status = repository.status()
        except GitCommandFailure as e:
            self.logger.error(f"git status failed in {repo_path}: {e}")
            return [f"{INDENT}git status failed."] + [
                f"{INDENT}{line}" for line in e.result.stderr if line.strip()
            ]

        self.logger.info("Working tree is clean." if status.is_clean else "Working tree is not clean.")

        stale = self.tracker.update(
            repo_path,
            status.is_clean,
            lambda: self._last_commit_date(repository)
        )
        if stale:
            return [f"{INDENT}uncommitted changes for over {STALE_AFTER.days} days; time to commit."]
        return []

    def _last_commit_date(self, repository: GitRepository) -> Optional[datetime]:
        try:
            return repository.log_one("HEAD").date
        except GitCommandFailure as e:
            # unborn branch: nothing committed yet
            self.logger.warning(f"No last commit date: {e}")
            return None

    def _check_remotes(self, repository: GitRepository) -> List[str]:
        findings = []
        for remote in repository.remotes():
            self.logger.info(f"Check remote {remote}")
            result = repository.remote_show(remote)

            if result.ok:
                self.logger.debug("\n".join(result.stdout))
                divergent = repository.remote_divergence(result)
                if divergent:
                    findings.append(f"{INDENT}push or pull {remote}")
                    findings.extend(f"{INDENT}{INDENT}{line}" for line in divergent)
            else:
                self.logger.error("\n".join(result.stderr))
                findings.append(f"{INDENT}remote show {remote} failed.")
                findings.extend(f"{INDENT}{line}" for line in result.stderr if line.strip())
        return findings
