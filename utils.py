"""
Utility functions for gallery maintenance
Helper functions for finding and removing files on disk

Includes:
- Stage result accounting
- Glob-based path enumeration with literal root paths
- Best-effort bulk removal
"""

import os
import sys
import glob
import time
import shutil
import logging
from dataclasses import dataclass
from typing import List, Iterable, TextIO

logger = logging.getLogger(__name__)


class EnumerationError(Exception):
    """Raised when the files of a stage cannot be listed"""


# ============ STAGE RESULTS ============

@dataclass
class StageResult:
    attempted: int = 0
    failed: int = 0
    elapsed: float = 0.0

    @property
    def succeeded(self) -> int:
        return self.attempted - self.failed

    def to_dict(self) -> dict:
        return {
            'attempted': self.attempted,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'elapsed': round(self.elapsed, 3)
        }


def format_duration(seconds: float) -> str:
    """Short human readable duration, e.g. 350ms or 2.41s"""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.2f}s"


# ============ PATH ENUMERATION ============

def find_matches(root: str, pattern: str) -> List[str]:
    """
    Find all entries below root matching a glob pattern.

    Glob metacharacters in root are escaped, so only pattern contributes
    wildcards. "**" in pattern matches any number of directories, including none.
    Entries below a symlinked directory are skipped, so nothing outside root
    is returned.

    Args:
        root: Directory to search
        pattern: Relative glob pattern, e.g. "**/*.json" or "*"

    Returns:
        Sorted list of absolute paths (empty if nothing matches)

    Raises:
        EnumerationError: If the search cannot complete
    """
    root = os.path.abspath(root)
    search = os.path.join(glob.escape(root), pattern)

    try:
        matches = glob.glob(search, recursive=True, include_hidden=True)
        real_root = os.path.realpath(root)
        # Entries reached through a symlinked directory live outside root
        matches = [m for m in matches if _is_within(os.path.dirname(m), real_root)]
    except (OSError, ValueError) as e:
        raise EnumerationError(f"{root}: {e}") from e

    return sorted(matches)


def _is_within(path: str, real_root: str) -> bool:
    real_path = os.path.realpath(path)
    return os.path.commonpath([real_path, real_root]) == real_root


# ============ REMOVAL ============

def remove_path(name: str, recursive: bool = False):
    """Remove a file, or with recursive=True a whole directory tree"""
    if not recursive:
        # Empty directories go too; non-empty ones raise OSError
        if os.path.isdir(name) and not os.path.islink(name):
            os.rmdir(name)
        else:
            os.remove(name)
        return

    try:
        if os.path.isdir(name) and not os.path.islink(name):
            shutil.rmtree(name)
        else:
            os.remove(name)
    except FileNotFoundError:
        # Already gone
        pass


def remove_all(matches: Iterable[str], recursive: bool = False, out: TextIO = None) -> StageResult:
    """
    Remove every path in matches, continuing past individual failures.

    Writes "." for each removed path and "E" for each failure to out.

    Args:
        matches: Paths to remove, processed in order
        recursive: Remove directories including their contents
        out: Progress stream (defaults to stdout)

    Returns:
        StageResult with attempted/failed counts and elapsed seconds
    """
    out = out or sys.stdout
    start = time.time()
    result = StageResult()

    for name in matches:
        result.attempted += 1

        try:
            remove_path(name, recursive=recursive)
            out.write('.')
        except OSError as e:
            result.failed += 1
            logger.debug(f"remove: {e}")
            out.write('E')

        out.flush()

    if result.attempted:
        out.write('\n')
        out.flush()

    result.elapsed = time.time() - start
    return result
