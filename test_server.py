#!/usr/bin/env python3
"""Tests for MCP tool registration and the shared logging setup."""

import asyncio
import logging
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from mcp.server.fastmcp import FastMCP

from gitarchive.config import Config
from gitarchive.server import register_tools, setup_logging


class TestServer(unittest.TestCase):

    def setUp(self):
        temp_dir = Path(tempfile.gettempdir())
        self.config = Config(
            notify_file=temp_dir / "gitarchive_notify.txt",
            cache_file=temp_dir / "gitarchive_cache.txt"
        )

    def test_tools_are_registered(self):
        server = FastMCP("Git Archive test")
        register_tools(server, self.config)
        tools = asyncio.run(server.list_tools())
        self.assertEqual(
            sorted(tool.name for tool in tools),
            ["add_branch", "check_repository", "create_settings", "set_archive_folder", "walk_repositories"]
        )

    def test_setup_logging_configures_package_logger(self):
        setup_logging(Config(log_level="DEBUG"))
        logger = logging.getLogger('gitarchive')
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertTrue(logger.handlers)
        self.assertFalse(logger.propagate)


if __name__ == "__main__":
    unittest.main()
