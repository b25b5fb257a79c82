"""Typed view over the git subcommands a health check needs."""

import logging
from pathlib import Path
from typing import List

from ..errors import GitCommandFailure
from .parsers import (
    CommitLogRecord, StatusSummary,
    parse_head_commit, parse_log_one, parse_name_list,
    parse_remote_divergence, parse_status
)
from .runner import GitCommandResult, GitCommandRunner


class GitRepository:
    """
    Pairs each git subcommand with the parser for its output.

    Methods that need stdout to mean anything raise GitCommandFailure on a
    non-zero exit; methods whose failure is reportable return the raw result.
    """

    def __init__(self, runner: GitCommandRunner):
        self.runner = runner
        self.logger = logging.getLogger('gitarchive.git.repository')

    @classmethod
    def at(cls, working_dir: Path) -> "GitRepository":
        return cls(GitCommandRunner(working_dir))

    def _require(self, *arguments: str) -> GitCommandResult:
        result = self.runner.run(*arguments)
        if not result.ok:
            raise GitCommandFailure(arguments, result)
        return result

    def status(self) -> StatusSummary:
        return parse_status(self._require("status").stdout)

    def log_one(self, ref: str = "HEAD") -> CommitLogRecord:
        return parse_log_one(self._require("log", "-1", ref).stdout)

    def head_commit(self, branch: str) -> str:
        return parse_head_commit(self._require("log", "-1", branch).stdout)

    def remotes(self) -> List[str]:
        return parse_name_list(self._require("remote").stdout)

    def tags(self) -> List[str]:
        return parse_name_list(self._require("tag").stdout)

    def remote_show(self, remote: str) -> GitCommandResult:
        return self.runner.run("remote", "show", remote)

    def remote_divergence(self, result: GitCommandResult) -> List[str]:
        return parse_remote_divergence(result.stdout)

    def archive(self, output: Path, ref: str) -> GitCommandResult:
        """Write a zip snapshot of ``ref`` to ``output``."""
        self.logger.debug(f"Archiving {ref} to {output}")
        return self.runner.run("archive", "-o", str(output), ref)
