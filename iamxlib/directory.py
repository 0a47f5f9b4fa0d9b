"""
iamxlib.directory — Export directory management.

Creates the destination directory and performs the optional pre-export wipe.
The wipe never prompts by itself: callers inject a confirmation callable
(prompt text -> bool), which keeps the deletion logic testable.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Create path and any missing parents. Existing directories are left alone.

    Raises:
        OSError: if the directory cannot be created
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _remove_entry(entry: Path) -> None:
    if entry.is_dir() and not entry.is_symlink():
        shutil.rmtree(entry)
    else:
        entry.unlink()


def wipe_directory(
    path: Union[str, Path],
    forced: bool = False,
    confirm: Optional[ConfirmFn] = None,
) -> bool:
    """
    Delete everything inside path, keeping path itself.

    Args:
        path: Directory to empty
        forced: Skip the confirmation step
        confirm: Callable asked for confirmation when not forced

    Returns:
        bool: True if the contents were removed, False if the wipe was
        skipped, declined or left anything behind. An entry that cannot be
        removed is logged and the remaining entries are still attempted.
    """
    path = Path(path)

    if not path.exists():
        logger.warning("Export path %s does not exist, nothing to erase", path)
        return False

    if not forced:
        if confirm is None:
            logger.warning("No confirmation available, skipping erase of %s", path)
            return False
        if not confirm(f"Erase all contents of {path}?"):
            logger.info("Erase of %s aborted by user", path)
            return False

    try:
        entries = sorted(path.iterdir())
    except OSError as e:
        logger.warning("Could not list contents of %s: %s", path, e)
        return False

    removed = 0
    failed = 0
    for entry in entries:
        try:
            _remove_entry(entry)
            removed += 1
        except OSError as e:
            logger.warning("Could not erase %s: %s", entry, e)
            failed += 1

    if failed:
        logger.warning("Erased %d item(s) from %s, %d could not be removed", removed, path, failed)
        return False

    logger.info("Erased %d item(s) from %s", removed, path)
    return True
