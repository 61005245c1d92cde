#!/usr/bin/env python3
"""
Reset the gallery index, clear the cache, and remove sidecar files

Every stage asks for confirmation first and cannot be undone.

Usage:
    python reset_database.py            # ask before each stage
    python reset_database.py --index    # reset the index database only
    python reset_database.py --yes      # reset the index database without asking
"""

import sys
import time
import sqlite3
import logging
import argparse
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TextIO

from database import Database
from shared import Config
from utils import EnumerationError, StageResult, find_matches, remove_all, format_duration

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

AFFIRMATIVE = {'y', 'yes'}


@dataclass(frozen=True)
class ResetRequest:
    index_only: bool = False
    assume_yes: bool = False
    trace: bool = False


@dataclass(frozen=True)
class ResetStage:
    name: str
    prompt: str
    subject: str
    action: Callable[[], StageResult]
    root: Optional[str] = None
    pattern: Optional[str] = None


def confirm(label: str, force: Optional[bool] = None, ask: Callable[[str], str] = None) -> bool:
    """
    Ask a yes/no question. Anything but an explicit yes means no.

    Args:
        label: Question to show
        force: Skip the question and return this value
        ask: Reads the answer (input() by default)
    """
    if force is not None:
        return force

    if ask is None:
        ask = input

    try:
        answer = ask(f"{label} [y/N] ")
    except (EOFError, KeyboardInterrupt):
        return False

    return (answer or '').strip().lower() in AFFIRMATIVE


# ============ STAGES ============

def reset_index_db(db: Database, admin_password: Optional[str] = None) -> StageResult:
    """Drop all index tables and restore the default schema"""
    result = StageResult()
    start = time.time()

    logger.info("dropping existing tables")
    result.attempted = len(db.drop_all())

    logger.info("restoring default schema")
    db.migrate(force=True, quiet=False)

    if admin_password:
        logger.info("restoring initial admin password")
        db.init_admin_password(admin_password)

    result.elapsed = time.time() - start
    logger.info(f"database reset completed in {format_duration(result.elapsed)}")

    return result


def clear_files(subject: str, root: str, pattern: str, recursive: bool = False,
                out: TextIO = None) -> StageResult:
    """Remove everything below root matching pattern, reporting progress"""
    matches = find_matches(root, pattern)

    if not matches:
        logger.info(f"found no {subject}")
        return StageResult()

    logger.info(f"removing {len(matches)} {subject}")

    result = remove_all(matches, recursive=recursive, out=out)

    logger.info(f"removed {subject} [{format_duration(result.elapsed)}]")
    if result.failed:
        logger.warning(f"could not remove {result.failed} of {result.attempted} {subject}")

    return result


def _file_stage(name: str, prompt: str, subject: str, root: str, pattern: str,
                recursive: bool = False, out: TextIO = None) -> ResetStage:
    return ResetStage(
        name=name,
        prompt=prompt,
        subject=subject,
        action=lambda: clear_files(subject, root, pattern, recursive=recursive, out=out),
        root=root,
        pattern=pattern,
    )


def file_stages(config: Config, out: TextIO = None) -> List[ResetStage]:
    """File based stages in the order they run"""
    return [
        # Top-level cache entries, each removed with its contents
        _file_stage('cache', "Clear cache incl thumbnails?", "cache files",
                    config.cache_path, '*', recursive=True, out=out),
        _file_stage('sidecar_json', "Delete all *.json sidecar files?", "*.json sidecar files",
                    config.sidecar_path, '**/*.json', out=out),
        _file_stage('sidecar_yaml', "Delete all *.yml metadata files?", "*.yml metadata files",
                    config.sidecar_path, '**/*.yml', out=out),
        _file_stage('album_yaml', "Delete all *.yml album files?", "*.yml album files",
                    config.albums_path, '**/*.yml', out=out),
    ]


# ============ ORCHESTRATION ============

def run_reset(config: Config, request: ResetRequest, ask: Callable[[str], str] = None,
              out: TextIO = None) -> Dict[str, StageResult]:
    """
    Run the reset stages in order, asking before each one.

    Database errors propagate; file stages only log their failures.

    Returns:
        Results of the stages that ran, keyed by stage name
    """
    results: Dict[str, StageResult] = {}

    if not request.assume_yes:
        logger.warning("This will delete and recreate your index database after confirmation")

        if not request.index_only:
            logger.warning("You will be asked next if you also want to remove cache and sidecar files")

    if request.trace:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.info("reset: enabled trace mode")

    force_index = True if request.assume_yes else None

    if confirm("Delete and recreate index database?", force=force_index, ask=ask):
        results['index'] = reset_index_db(config.db, config.admin_password)
    else:
        logger.info("keeping index database")

    if request.index_only or request.assume_yes:
        return results

    for stage in file_stages(config, out=out):
        if not confirm(stage.prompt, ask=ask):
            logger.info(f"keeping {stage.subject}")
            continue

        try:
            results[stage.name] = stage.action()
        except EnumerationError as e:
            logger.error(f"reset: {e} (find {stage.subject})")

    return results


def main(argv: List[str] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='gallery-reset',
        description='Resets the index, clears the cache, and removes sidecar files'
    )
    parser.add_argument('-i', '--index', action='store_true', help='reset index database only')
    parser.add_argument('-t', '--trace', action='store_true', help='show trace logs for debugging')
    parser.add_argument('-y', '--yes', action='store_true', help='assume "yes" and run non-interactively')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.trace else logging.INFO,
        format=LOG_FORMAT
    )

    request = ResetRequest(index_only=args.index, assume_yes=args.yes, trace=args.trace)
    config = Config.from_env()

    try:
        config.init()
        run_reset(config, request)
    except (OSError, sqlite3.Error) as e:
        logger.error(f"reset: {e}")
        return 1
    finally:
        config.shutdown()

    return 0


if __name__ == '__main__':
    sys.exit(main())
