"""
gitarchive - health checks and incremental archives for local git working copies.

Detects working trees left dirty for too long and branches that are not
pushed, and snapshots tags and tracked branch heads into a backup folder.
"""

__version__ = "1.0.0"
__description__ = "Repository health checks and incremental git archives"

from .cli import main

__all__ = ["main"]
