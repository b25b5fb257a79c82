#!/usr/bin/env python3
"""
Unit tests for the git output parsers.

Covers the status summary, the single-commit log state machine, the
remote comparison section and the list/head helpers.
"""

import sys
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from gitarchive.errors import LogParseError
from gitarchive.git.parsers import (
    parse_head_commit, parse_log_date, parse_log_one, parse_name_list,
    parse_remote_divergence, parse_status
)
from git_fakes import (
    HEAD_COMMIT, LOG_HEAD, REMOTE_SHOW_DIVERGED, REMOTE_SHOW_IN_SYNC,
    STATUS_CLEAN, STATUS_DIRTY
)


class TestStatusParse(unittest.TestCase):

    def test_clean_tree(self):
        status = parse_status(STATUS_CLEAN.splitlines())
        self.assertEqual(status.branch, "master")
        self.assertEqual(status.summary, "nothing to commit, working tree clean")
        self.assertTrue(status.is_clean)

    def test_dirty_tree(self):
        status = parse_status(STATUS_DIRTY.splitlines())
        self.assertEqual(status.branch, "master")
        self.assertFalse(status.is_clean)

    def test_clean_marker_must_be_in_last_line(self):
        lines = ["On branch master", "working tree clean", "", "Untracked files present"]
        self.assertFalse(parse_status(lines).is_clean)

    def test_older_git_wording_is_dirty(self):
        # "working directory clean" was used by git before 2.9
        lines = ["On branch master", "nothing to commit, working directory clean"]
        self.assertFalse(parse_status(lines).is_clean)

    def test_detached_head(self):
        status = parse_status(["HEAD detached at 1a2b3c4", "nothing to commit, working tree clean"])
        self.assertEqual(status.branch, "1a2b3c4")

    def test_empty_output_is_dirty(self):
        status = parse_status([])
        self.assertEqual(status.branch, "")
        self.assertFalse(status.is_clean)


class TestLogParse(unittest.TestCase):

    def test_full_record(self):
        record = parse_log_one(LOG_HEAD.splitlines())
        self.assertEqual(record.commit_id, HEAD_COMMIT)
        self.assertEqual(record.author, "Jane Doe <jane@example.com>")
        self.assertEqual(
            record.date,
            datetime(2026, 10, 5, 14, 3, 22, tzinfo=timezone(timedelta(hours=9)))
        )
        self.assertEqual(record.message, "Fix archive naming\nTags with slashes produced nested paths.")

    def test_merge_header_is_ignored(self):
        lines = [
            "commit abc123",
            "Merge: 1111111 2222222",
            "Author: A <a@example.com>",
            "Date:   Tue Jan 6 08:00:00 2026 -0500",
            "",
            "    Merge branch 'develop'",
        ]
        record = parse_log_one(lines)
        self.assertEqual(record.commit_id, "abc123")
        self.assertEqual(record.date.utcoffset(), timedelta(hours=-5))
        self.assertEqual(record.message, "Merge branch 'develop'")

    def test_decorated_commit_line(self):
        lines = ["commit abc123 (HEAD -> master, tag: v1)", "Date:   Tue Jan 6 08:00:00 2026 +0000"]
        record = parse_log_one(lines)
        self.assertEqual(record.commit_id, "abc123")
        self.assertIsNone(record.message)

    def test_unparseable_date_is_fatal(self):
        lines = ["commit abc123", "Date:   2026-01-06T08:00:00+00:00", ""]
        with self.assertRaises(LogParseError):
            parse_log_one(lines)

    def test_missing_date_is_fatal(self):
        with self.assertRaises(LogParseError):
            parse_log_one(["commit abc123", "Author: A <a@example.com>", "", "    msg"])

    def test_empty_output_is_fatal(self):
        with self.assertRaises(LogParseError):
            parse_log_one([])

    def test_single_digit_day(self):
        date = parse_log_date("Sun Feb 1 00:00:01 2026 +0100")
        self.assertEqual(date.day, 1)
        self.assertEqual(date.month, 2)

    def test_bad_month_name(self):
        with self.assertRaises(LogParseError):
            parse_log_date("Mon Okt 5 14:03:22 2026 +0900")


class TestRemoteDivergence(unittest.TestCase):

    def test_in_sync(self):
        self.assertEqual(parse_remote_divergence(REMOTE_SHOW_IN_SYNC.splitlines()), [])

    def test_diverged_branches_in_order(self):
        divergent = parse_remote_divergence(REMOTE_SHOW_DIVERGED.splitlines())
        self.assertEqual(divergent, [
            "develop pushes to develop (local out of date)",
            "master  pushes to master  (fast-forwardable)",
        ])

    def test_without_push_section(self):
        lines = ["* remote origin", "  Fetch URL: x", "    master tracked"]
        self.assertEqual(parse_remote_divergence(lines), [])

    def test_singular_heading_is_not_recognised(self):
        lines = ["  Local ref configured for 'git push':", "    master pushes to master (local out of date)"]
        self.assertEqual(parse_remote_divergence(lines), [])


class TestListsAndHeads(unittest.TestCase):

    def test_name_list_drops_blanks(self):
        self.assertEqual(parse_name_list(["v1", "", "  ", "v2"]), ["v1", "v2"])

    def test_head_commit(self):
        self.assertEqual(parse_head_commit(LOG_HEAD.splitlines()), HEAD_COMMIT)

    def test_head_commit_missing(self):
        with self.assertRaises(LogParseError):
            parse_head_commit([])


if __name__ == "__main__":
    unittest.main()
