"""Error handling framework for gitarchive."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .git.runner import GitCommandResult


class GitArchiveError(Exception):
    """Base class for errors that abort the check of a single repository."""


class GitCommandFailure(GitArchiveError):
    """A git invocation exited non-zero where its output was required."""

    def __init__(self, arguments, result: "GitCommandResult"):
        self.arguments = tuple(arguments)
        self.result = result
        detail = "; ".join(line for line in result.stderr if line.strip())
        super().__init__(
            f"git {' '.join(self.arguments)} failed with exit code {result.exit_code}"
            + (f": {detail}" if detail else "")
        )


class LogParseError(GitArchiveError):
    """Output of ``git log -1`` could not be turned into a commit record."""


class SettingsError(GitArchiveError):
    """Per-repository settings file is missing or malformed."""


class ErrorCategory(Enum):
    """Categories of errors for structured error handling."""
    GIT_COMMAND = "git_command"
    LOG_PARSE = "log_parse"
    SETTINGS = "settings"
    FILE_IO = "file_io"
    SYSTEM = "system"


@dataclass
class ErrorResponse:
    """Standardized error response format for check and walk operations."""
    error: str
    error_code: str
    message: str
    timestamp: str
    category: str
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert error response to dictionary format."""
        result = {
            "error": self.error,
            "error_code": self.error_code,
            "message": self.message,
            "timestamp": self.timestamp,
            "category": self.category
        }
        if self.context:
            result["context"] = self.context
        return result


class ErrorHandler:
    """Turns exceptions raised while checking a repository into responses."""

    def __init__(self):
        self.logger = logging.getLogger('gitarchive.error_handler')

    def handle_check_error(self, error: Exception, context: Dict[str, Any] = None) -> ErrorResponse:
        """Handle an error raised while checking or configuring a repository."""
        context = context or {}

        if isinstance(error, LogParseError):
            error_code = "GIT_LOG_UNPARSEABLE"
            category = ErrorCategory.LOG_PARSE
            message = f"Unexpected git log output: {error}"
        elif isinstance(error, GitCommandFailure):
            error_code = "GIT_COMMAND_FAILED"
            category = ErrorCategory.GIT_COMMAND
            message = str(error)
        elif isinstance(error, SettingsError):
            error_code = "SETTINGS_INVALID"
            category = ErrorCategory.SETTINGS
            message = str(error)
        elif isinstance(error, PermissionError):
            error_code = "FILE_PERMISSION_DENIED"
            category = ErrorCategory.FILE_IO
            message = f"Permission denied: {error}"
        elif isinstance(error, OSError):
            error_code = "FILE_IO_ERROR"
            category = ErrorCategory.FILE_IO
            message = f"File system error: {error}"
        else:
            error_code = "GENERAL_ERROR"
            category = ErrorCategory.SYSTEM
            message = f"Repository check failed: {error}"

        error_response = ErrorResponse(
            error="Repository check failed",
            error_code=error_code,
            message=message,
            timestamp=datetime.now().isoformat(),
            category=category.value,
            context=context
        )

        self.logger.error(
            f"Repository check error: {message}",
            extra={
                'operation': 'check_error',
                'error_code': error_code,
                'repository_path': context.get('repository_path')
            }
        )

        return error_response

    def create_success_response(self, operation: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a standardized success response."""
        return {
            "success": True,
            "operation": operation,
            "timestamp": datetime.now().isoformat(),
            "data": data
        }


# Initialize global error handler
error_handler = ErrorHandler()
