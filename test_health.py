#!/usr/bin/env python3
"""
Tests for the repository health evaluator, including the multi-run
scenarios: a tree that stays dirty past the threshold and then gets
committed, and tag archives that are produced only once.
"""

import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from gitarchive.config import ArchivePolicy, Config, SettingsLocation
from gitarchive.errors import LogParseError, SettingsError
from gitarchive.health import RepositoryHealthEvaluator, resolve_repository_root
from gitarchive.settings import create_settings
from gitarchive.staleness import StalenessCache
from git_fakes import (
    REMOTE_SHOW_DIVERGED, REMOTE_SHOW_IN_SYNC, STATUS_CLEAN, STATUS_DIRTY,
    FakeClock, healthy_runner
)


class HealthTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp()).resolve()
        self.repo_dir = self.temp_dir / "tools"
        self.repo_dir.mkdir()
        self.archive_dir = self.temp_dir / "backup"
        self.archive_dir.mkdir()
        self.config = Config(
            folders=[self.temp_dir],
            notify_file=self.temp_dir / "notify.txt",
            cache_file=self.temp_dir / "git_archive.txt",
            policy=ArchivePolicy(settings_location=SettingsLocation.REPO_ROOT)
        )
        create_settings(self.repo_dir, SettingsLocation.REPO_ROOT, str(self.archive_dir), ["master"])
        self.clock = FakeClock()
        self.cache = StalenessCache.load(self.config.cache_file)
        self.runner = healthy_runner()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def evaluator(self):
        return RepositoryHealthEvaluator(
            self.config, self.cache,
            repository_factory=self.runner.repository,
            clock=self.clock
        )

    def check(self):
        return self.evaluator().check(self.repo_dir)


class TestResolveRoot(unittest.TestCase):

    def test_metadata_dir_steps_up(self):
        root = Path(tempfile.gettempdir()).resolve() / "tools"
        self.assertEqual(resolve_repository_root(root / ".git"), root)
        self.assertEqual(resolve_repository_root(root), root)


class TestHealthEvaluator(HealthTestCase):

    def test_healthy_repository(self):
        self.assertEqual(self.check(), [])

    def test_check_from_metadata_dir(self):
        self.assertEqual(self.evaluator().check(self.repo_dir / ".git"), [])
        self.assertTrue((self.archive_dir / "tools-master-latest.zip").exists())

    def test_diverged_remote(self):
        self.runner.respond("remote", stdout="origin\n")
        self.runner.respond("remote", "show", "origin", stdout=REMOTE_SHOW_DIVERGED)
        self.assertEqual(self.check(), [
            str(self.repo_dir),
            "    push or pull origin",
            "        develop pushes to develop (local out of date)",
            "        master  pushes to master  (fast-forwardable)",
        ])

    def test_remote_in_sync(self):
        self.runner.respond("remote", stdout="origin\n")
        self.runner.respond("remote", "show", "origin", stdout=REMOTE_SHOW_IN_SYNC)
        self.assertEqual(self.check(), [])

    def test_unreachable_remote_is_reported(self):
        self.runner.respond("remote", stdout="origin\nbackup\n")
        self.runner.respond("remote", "show", "origin", stdout=REMOTE_SHOW_IN_SYNC)
        self.runner.respond(
            "remote", "show", "backup",
            stderr="ssh: Could not resolve hostname nas\nfatal: Could not read from remote repository.\n",
            exit_code=128
        )
        self.assertEqual(self.check(), [
            str(self.repo_dir),
            "    remote show backup failed.",
            "    ssh: Could not resolve hostname nas",
            "    fatal: Could not read from remote repository.",
        ])
        # archiving still ran after the remote failure
        self.assertTrue((self.archive_dir / "tools-master-latest.zip").exists())

    def test_disabled_archive_folder_is_reported(self):
        create_settings(self.repo_dir, SettingsLocation.REPO_ROOT, "-")
        self.assertEqual(self.check(), [str(self.repo_dir), "    archive folder not configured"])
        self.assertEqual(self.runner.archive_calls(), [])

    def test_status_failure_is_reported(self):
        self.runner.respond("status", stderr="fatal: not a git repository\n", exit_code=128)
        self.assertEqual(self.check()[:3], [
            str(self.repo_dir),
            "    git status failed.",
            "    fatal: not a git repository",
        ])
        self.assertEqual(len(self.cache), 0)

    def test_missing_settings_raises(self):
        (self.repo_dir / "git_archive.json").unlink()
        with self.assertRaises(SettingsError):
            self.check()

    def test_malformed_log_propagates(self):
        self.runner.respond("status", stdout=STATUS_DIRTY)
        self.check()
        self.runner.respond("log", "-1", "HEAD", stdout="commit abc\nDate:   yesterday\n")
        with self.assertRaises(LogParseError):
            self.check()

    def test_relative_archive_folder_ignores_process_cwd(self):
        create_settings(self.repo_dir, SettingsLocation.REPO_ROOT, "../backup", ["master"])
        previous_cwd = os.getcwd()
        os.chdir(self.archive_dir)
        self.addCleanup(os.chdir, previous_cwd)

        self.assertEqual(self.check(), [])
        self.assertTrue((self.archive_dir / "tools-master-latest.zip").exists())
        self.assertTrue((self.archive_dir / "tools-master-latest.ref").exists())

        self.runner.calls.clear()
        self.assertEqual(self.check(), [])
        self.assertEqual(self.runner.archive_calls(), [])

    def test_unborn_head_still_goes_stale(self):
        self.runner.respond("status", stdout=STATUS_DIRTY)
        self.runner.respond("log", "-1", "HEAD", stderr="fatal: ambiguous argument 'HEAD': unknown revision\n",
                            exit_code=128)
        first_seen = self.clock.now
        self.assertEqual(self.check(), [])

        self.clock.advance(days=31)
        self.assertEqual(self.check(), [str(self.repo_dir), "    uncommitted changes for over 30 days; time to commit."])
        self.assertEqual(self.cache.get(str(self.repo_dir)), first_seen)
        self.assertTrue((self.archive_dir / "tools-master-latest.zip").exists())


class TestScenarios(HealthTestCase):

    def test_dirty_tree_goes_stale_then_gets_committed(self):
        key = str(self.repo_dir)
        self.runner.respond("status", stdout=STATUS_DIRTY)

        # first sighting
        first_seen = self.clock.now
        self.assertEqual(self.check(), [])
        self.assertEqual(self.cache.get(key), first_seen)

        # 31 days later, still dirty; last commit predates the first sighting
        self.clock.advance(days=31)
        self.assertEqual(self.check(), [key, "    uncommitted changes for over 30 days; time to commit."])
        self.assertEqual(StalenessCache.load(self.config.cache_file).get(key), first_seen)

        # committed and clean
        self.runner.respond("status", stdout=STATUS_CLEAN)
        self.assertEqual(self.check(), [])
        self.assertNotIn(key, StalenessCache.load(self.config.cache_file))

    def test_tags_are_archived_once(self):
        self.runner.respond("tag", stdout="v1\nv2\n")

        self.check()
        self.assertEqual(
            sorted(call[3] for call in self.runner.archive_calls()),
            ["master", "v1", "v2"]
        )

        self.runner.calls.clear()
        self.check()
        self.assertEqual(self.runner.archive_calls(), [])


if __name__ == "__main__":
    unittest.main()
