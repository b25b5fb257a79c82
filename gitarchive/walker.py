"""
Batch walk over every configured repository.

Repositories are found by their settings file, checked one at a time, and
the concatenated findings are written to the notification file.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .archive import INDENT
from .config import SETTINGS_FILE_NAME, Config, NotificationNaming
from .errors import GitArchiveError, error_handler
from .health import RepositoryHealthEvaluator, resolve_repository_root
from .platform import write_text_atomic
from .staleness import StalenessCache


def discover_repositories(folders: Iterable[Path]) -> List[Path]:
    """Repository roots holding a settings file, each reported once."""
    logger = logging.getLogger('gitarchive.walker')
    roots: List[Path] = []
    seen = set()

    for folder in folders:
        if not folder.is_dir():
            logger.warning(f"Repository folder does not exist: {folder}")
            continue
        for settings_file in sorted(folder.rglob(SETTINGS_FILE_NAME)):
            root = resolve_repository_root(settings_file.parent)
            if root not in seen:
                seen.add(root)
                roots.append(root)

    logger.debug(f"Discovered {len(roots)} repositories")
    return roots


def notification_path(config: Config, now: Optional[datetime] = None) -> Path:
    notify_file = config.notify_file
    if config.policy.notification_naming == NotificationNaming.TIMESTAMPED:
        stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
        return notify_file.with_name(f"{notify_file.stem}_{stamp}{notify_file.suffix}")
    return notify_file


def write_notification(config: Config, findings: List[str], now: Optional[datetime] = None) -> Path:
    path = notification_path(config, now)
    path.parent.mkdir(parents=True, exist_ok=True)
    write_text_atomic(path, "".join(f"{line}\n" for line in findings))
    logging.getLogger('gitarchive.walker').info(f"Wrote {len(findings)} report lines to {path}")
    return path


def walk(config: Config, silent: bool = False,
         evaluator_factory: Optional[Callable[[Config, StalenessCache], RepositoryHealthEvaluator]] = None) -> List[str]:
    """
    Check every repository under the configured folders.

    Args:
        config: Process configuration
        silent: Skip writing the notification file
        evaluator_factory: Builds the evaluator; defaults to RepositoryHealthEvaluator

    Returns:
        Findings of all repositories, in walk order
    """
    logger = logging.getLogger('gitarchive.walker')

    if not config.folders:
        logger.warning("folders not defined.")
        return []

    cache = StalenessCache.load(config.cache_file)
    evaluator = (evaluator_factory or RepositoryHealthEvaluator)(config, cache)

    findings: List[str] = []
    for root in discover_repositories(config.folders):
        try:
            findings.extend(evaluator.check(root))
        except (GitArchiveError, OSError) as e:
            response = error_handler.handle_check_error(e, {'repository_path': str(root)})
            findings.append(str(root))
            findings.append(f"{INDENT}{response.message}")

    if findings and not silent:
        write_notification(config, findings)
    return findings
