"""
scanner.py

Responsibility: find the source files that carry a given annotation.

Rules:
- Walk the whole tree under the root, depth first.
- Only files with the target extension are read, as UTF-8 text.
- A file or subdirectory that cannot be read is logged and skipped; only an
  untraversable root fails the scan.
- Matches are redirected to their owning file (`parts.resolve`), wrapped in
  double quotes and sorted, so output order never depends on the filesystem.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from buildsync import parts
from buildsync.patterns import DetectionRule

logger = logging.getLogger(__name__)

DART_EXTENSION = ".dart"


class ScanIOError(OSError):
    pass


def _ensure_traversable(root: Path) -> None:
    if not root.is_dir():
        raise ScanIOError(f"Scan root is not a directory: {root}")
    try:
        with os.scandir(root):
            pass
    except OSError as e:
        raise ScanIOError(f"Cannot traverse scan root {root}: {e}") from e


def _log_walk_error(err: OSError) -> None:
    logger.warning("Skipping unreadable directory %s: %s", err.filename, err)


def _iter_source_files(root: Path, extension: str):
    for dirpath, _dirs, filenames in os.walk(root, onerror=_log_walk_error):
        for name in filenames:
            path = Path(dirpath) / name
            if path.suffix == extension:
                yield path


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Error processing file %s: %s", path, e)
        return None


def scan(root_dir: str | Path, rule: DetectionRule, *, extension: str = DART_EXTENSION) -> list[str]:
    """
    Return the quoted, sorted paths of files under `root_dir` matching `rule`.

    Paths are built from `root_dir` as given, so an absolute root yields
    absolute paths. Duplicates (several fragments of one owner) are kept.
    """
    root = Path(root_dir)
    _ensure_traversable(root)

    regex = rule.compile()
    found: list[str] = []

    for path in _iter_source_files(root, extension):
        content = _read_text(path)
        if content is None:
            continue
        if regex.search(content):
            owner = parts.resolve(path, content)
            if owner != path:
                logger.debug("%s is a part of %s", path, owner)
            found.append(str(owner))

    quoted = [f'"{p}"' for p in found]
    quoted.sort()
    logger.debug("Found %d file(s) for %s", len(quoted), rule.kind.value)
    return quoted
