"""MCP server exposing repository checks and settings management."""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from .config import Config, load_configuration, validate_configuration
from .errors import GitArchiveError, error_handler
from .health import RepositoryHealthEvaluator, resolve_repository_root
from . import settings as repo_settings
from .staleness import StalenessCache
from .walker import walk

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(config: Config) -> None:
    """Setup logging for every ``gitarchive.*`` logger."""
    class StructuredFormatter(logging.Formatter):
        def format(self, record):
            if hasattr(record, 'operation'):
                record.msg = f"[{record.operation}] {record.msg}"
            return super().format(record)

    # stdout belongs to the MCP transport; log to stderr
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )

    logger = logging.getLogger('gitarchive')
    logger.setLevel(getattr(logging, config.log_level))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(handler)
        logger.propagate = False


def check_repository_path(config: Config, path: Path) -> List[str]:
    """Check one repository with the persistent staleness cache."""
    cache = StalenessCache.load(config.cache_file)
    return RepositoryHealthEvaluator(config, cache).check(path)


def register_tools(server: FastMCP, server_config: Config) -> None:
    """Register MCP tools with the server instance."""

    @server.tool()
    def check_repository(path: str) -> dict:
        """
        Check one git working copy for stale uncommitted work, unpushed
        branches and missing archives, archiving new tags and branch heads.

        Args:
            path: Repository root (or its .git directory)

        Returns:
            Dictionary with the findings; an empty list means healthy
        """
        try:
            findings = check_repository_path(server_config, Path(path))
        except (GitArchiveError, OSError) as e:
            return error_handler.handle_check_error(e, {'repository_path': path}).to_dict()
        return error_handler.create_success_response(
            "check_repository", {"healthy": not findings, "findings": findings}
        )

    @server.tool()
    def walk_repositories(silent: bool = False) -> dict:
        """
        Check every repository under the configured folders.

        Args:
            silent: Do not write the notification file

        Returns:
            Dictionary with the findings of all repositories
        """
        try:
            findings = walk(server_config, silent=silent)
        except OSError as e:
            return error_handler.handle_check_error(e).to_dict()
        return error_handler.create_success_response(
            "walk_repositories", {"healthy": not findings, "findings": findings}
        )

    @server.tool()
    def create_settings(path: str, archive_folder: str, branches: Optional[List[str]] = None) -> dict:
        """
        Create the git_archive.json settings of a repository.

        Args:
            path: Repository root
            archive_folder: Backup folder for archives, or "-" to disable archiving
            branches: Branches to snapshot (defaults to master)
        """
        return _update_settings(
            "create_settings", path,
            lambda root, location: repo_settings.create_settings(root, location, archive_folder, branches)
        )

    @server.tool()
    def set_archive_folder(path: str, archive_folder: str) -> dict:
        """Change the archive folder of a repository."""
        return _update_settings(
            "set_archive_folder", path,
            lambda root, location: repo_settings.set_archive_folder(root, location, archive_folder)
        )

    @server.tool()
    def add_branch(path: str, branch: str) -> dict:
        """Add a branch to the snapshotted branches of a repository."""
        return _update_settings(
            "add_branch", path,
            lambda root, location: repo_settings.add_branch(root, location, branch)
        )

    def _update_settings(operation: str, path: str, update) -> dict:
        root = resolve_repository_root(Path(path))
        try:
            updated = update(root, server_config.policy.settings_location)
        except (GitArchiveError, OSError) as e:
            return error_handler.handle_check_error(e, {'repository_path': str(root)}).to_dict()
        return error_handler.create_success_response(operation, {
            "archive_folder": updated.archive_folder,
            "branches": sorted(updated.branches)
        })

    logging.getLogger('gitarchive.init').info("MCP tools registered successfully")


def initialize_server(server_config: Optional[Config] = None) -> FastMCP:
    """Initialize MCP server with stdio transport."""
    server_config = server_config or load_configuration()
    setup_logging(server_config)
    init_logger = logging.getLogger('gitarchive.init')

    validation_issues = validate_configuration(server_config)
    for issue in validation_issues:
        if issue.startswith("ERROR:"):
            init_logger.error(issue[7:])
        elif issue.startswith("WARNING:"):
            init_logger.warning(issue[9:])

    server = FastMCP("Git Archive", log_level=server_config.log_level)
    register_tools(server, server_config)
    init_logger.info("gitarchive MCP server initialized")
    return server


def main():
    """Main entry point for the gitarchive MCP server."""
    try:
        server = initialize_server()
        server.run(transport="stdio")
    except KeyboardInterrupt:
        logging.getLogger('gitarchive.init').info("Server stopped by user (Ctrl+C)")
    except ValueError as e:
        print(f"CRITICAL: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
