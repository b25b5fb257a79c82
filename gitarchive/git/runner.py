"""Git command execution using GitPython's command wrapper."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from git.cmd import Git

from ..platform import get_git_executable


@dataclass
class GitCommandResult:
    """Exit code and captured output of a single git invocation."""
    exit_code: int
    stdout: List[str] = field(default_factory=list)
    stderr: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def _split_lines(output: Union[str, bytes, None]) -> List[str]:
    if output is None:
        return []
    if isinstance(output, bytes):
        output = output.decode('utf-8', errors='replace')
    return output.splitlines()


class GitCommandRunner:
    """
    Runs git inside one working copy.

    The working directory is bound at construction and handed to the child
    process, so the process-wide current directory is never touched.
    Non-zero exit codes are returned to the caller, never raised.
    """

    def __init__(self, working_dir: Path):
        self.working_dir = Path(working_dir)
        self._git = Git(str(self.working_dir))
        self.logger = logging.getLogger('gitarchive.git.runner')

    def run(self, *arguments: str) -> GitCommandResult:
        """Run ``git <arguments>`` and capture everything it printed."""
        command = [get_git_executable(), *arguments]
        self.logger.debug(f"[{self.working_dir}] {' '.join(command)}")

        exit_code, stdout, stderr = self._git.execute(
            command,
            with_extended_output=True,
            with_exceptions=False,
            strip_newline_in_stdout=False
        )

        result = GitCommandResult(
            exit_code=exit_code,
            stdout=_split_lines(stdout),
            stderr=_split_lines(stderr)
        )
        if not result.ok:
            self.logger.debug(f"git {arguments[0] if arguments else ''} exited with {exit_code}")
        return result
