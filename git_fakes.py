"""Canned git output and a recording runner shared by the test modules."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

from gitarchive.git.repository import GitRepository
from gitarchive.git.runner import GitCommandResult

STATUS_CLEAN = """On branch master
Your branch is up to date with 'origin/master'.

nothing to commit, working tree clean
"""

STATUS_DIRTY = """On branch master
Changes not staged for commit:
  (use "git add <file>..." to update what will be committed)
  (use "git restore <file>..." to discard changes in working directory)
\tmodified:   README.md

no changes added to commit (use "git add" and/or "git commit -a")
"""

HEAD_COMMIT = "3f2a9c0d1e4b5a6978c0d1e2f3a4b5c6d7e8f901"

LOG_HEAD = f"""commit {HEAD_COMMIT}
Author: Jane Doe <jane@example.com>
Date:   Mon Oct 5 14:03:22 2026 +0900

    Fix archive naming

    Tags with slashes produced nested paths.
"""

REMOTE_SHOW_IN_SYNC = """* remote origin
  Fetch URL: git@example.com:team/tools.git
  Push  URL: git@example.com:team/tools.git
  HEAD branch: master
  Remote branch:
    master tracked
  Local branch configured for 'git pull':
    master merges with remote master
  Local refs configured for 'git push':
    master  pushes to master  (up to date)
"""

REMOTE_SHOW_DIVERGED = """* remote origin
  Fetch URL: git@example.com:team/tools.git
  Push  URL: git@example.com:team/tools.git
  HEAD branch: master
  Remote branches:
    develop tracked
    master  tracked
  Local branches configured for 'git pull':
    develop merges with remote develop
    master  merges with remote master
  Local refs configured for 'git push':
    develop pushes to develop (local out of date)
    master  pushes to master  (fast-forwardable)
"""


def log_for(commit_id: str, date: str = "Mon Oct 5 14:03:22 2026 +0900") -> str:
    return f"commit {commit_id}\nAuthor: Jane Doe <jane@example.com>\nDate:   {date}\n\n    Work\n"


class FakeClock:
    """Settable clock returning aware datetimes."""

    def __init__(self, now: datetime = None):
        self.now = now or datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)

    def __call__(self) -> datetime:
        return self.now


class FakeRunner:
    """
    Stands in for GitCommandRunner: answers from a table keyed by argument
    tuple and records every call. ``archive -o <file> <ref>`` creates the file.
    """

    def __init__(self):
        self.responses = {}
        self.calls = []

    def respond(self, *arguments, stdout: str = "", stderr: str = "", exit_code: int = 0) -> "FakeRunner":
        self.responses[arguments] = GitCommandResult(
            exit_code=exit_code,
            stdout=stdout.splitlines(),
            stderr=stderr.splitlines()
        )
        return self

    def run(self, *arguments) -> GitCommandResult:
        self.calls.append(arguments)
        if arguments in self.responses:
            result = self.responses[arguments]
        elif arguments[0] == "archive":
            result = GitCommandResult(exit_code=0)
        else:
            return GitCommandResult(exit_code=128, stderr=[f"fatal: unexpected git {' '.join(arguments)}"])

        if arguments[0] == "archive" and result.ok:
            Path(arguments[2]).write_bytes(b"PK\x05\x06" + b"\x00" * 18)
        return result

    def archive_calls(self):
        return [call for call in self.calls if call[0] == "archive"]

    def repository(self, root=None) -> GitRepository:
        return GitRepository(self)


def healthy_runner(status: str = STATUS_CLEAN, tags: str = "", remotes: str = "") -> FakeRunner:
    """Runner for a repository with a tracked master branch and the given state."""
    return (
        FakeRunner()
        .respond("status", stdout=status)
        .respond("log", "-1", "HEAD", stdout=LOG_HEAD)
        .respond("log", "-1", "master", stdout=LOG_HEAD)
        .respond("remote", stdout=remotes)
        .respond("tag", stdout=tags)
    )
