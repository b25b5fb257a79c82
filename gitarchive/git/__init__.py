"""Git command execution and output parsing for gitarchive."""

from .runner import GitCommandResult, GitCommandRunner
from .parsers import CommitLogRecord, StatusSummary
from .repository import GitRepository

__all__ = [
    'GitCommandResult',
    'GitCommandRunner',
    'CommitLogRecord',
    'StatusSummary',
    'GitRepository'
]
