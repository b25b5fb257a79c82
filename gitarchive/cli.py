"""Command line interface for gitarchive."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_configuration
from .errors import GitArchiveError, error_handler
from .health import resolve_repository_root
from . import settings as repo_settings
from .server import check_repository_path, setup_logging
from .walker import walk


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitarchive",
        description="Check git working copies for stale work and archive tags and branch heads."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    walk_parser = commands.add_parser("walk", help="check every repository under the configured folders")
    walk_parser.add_argument("-s", "--silent", action="store_true", help="do not write the notification file")

    check_parser = commands.add_parser("check", help="check a single repository")
    check_parser.add_argument("path", nargs="?", default=".", help="repository root (default: current directory)")

    settings_parser = commands.add_parser("settings", help="edit git_archive.json of the current repository")
    settings_commands = settings_parser.add_subparsers(dest="settings_command", required=True)

    create_parser = settings_commands.add_parser("create", help="create the settings file")
    create_parser.add_argument("archive_folder", help='archive folder, or "-" to disable archiving')
    create_parser.add_argument("-b", "--branch", action="append", dest="branches", help="branch to snapshot")

    archive_parser = settings_commands.add_parser("archive", help="set the archive folder")
    archive_parser.add_argument("archive_folder")

    add_parser = settings_commands.add_parser("add", help="add a branch to snapshot")
    add_parser.add_argument("branch")

    for sub in (create_parser, archive_parser, add_parser):
        sub.add_argument("-C", "--repository", default=".", help="repository root (default: current directory)")

    commands.add_parser("serve", help="run the MCP server on stdio")
    return parser


def _print_findings(findings: List[str]) -> int:
    for line in findings:
        print(line)
    return 1 if findings else 0


def _run_settings(args, location) -> int:
    root = resolve_repository_root(Path(args.repository))
    if args.settings_command == "create":
        updated = repo_settings.create_settings(root, location, args.archive_folder, args.branches)
    elif args.settings_command == "archive":
        updated = repo_settings.set_archive_folder(root, location, args.archive_folder)
    else:
        updated = repo_settings.add_branch(root, location, args.branch)
    print(f"archive folder: {updated.archive_folder}")
    print(f"branches: {', '.join(sorted(updated.branches))}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        from .server import main as serve
        serve()
        return 0

    try:
        config = load_configuration()
    except ValueError as e:
        print(f"gitarchive: {e}", file=sys.stderr)
        return 2
    setup_logging(config)

    try:
        if args.command == "walk":
            return _print_findings(walk(config, silent=args.silent))
        if args.command == "check":
            return _print_findings(check_repository_path(config, Path(args.path)))
        return _run_settings(args, config.policy.settings_location)
    except GitArchiveError as e:
        response = error_handler.handle_check_error(e)
        print(f"gitarchive: {response.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
