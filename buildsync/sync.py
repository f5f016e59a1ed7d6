"""
sync.py

Responsibility: rewrite the `generate_for` lists of `build.yaml` from a fresh scan.

Flow:
1) Load `<workdir>/build.yaml` (missing or malformed -> ConfigError, before any scan)
2) For each registered annotation, scan the tree and replace
   `targets.$default.builders.<target_key>.generate_for` if that field exists
3) Dump the whole document back in one write
4) Normalize the written text (quotes, workdir prefix, path separators)

Builder sections are never created: a document missing one is left alone for
that annotation.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Any

import yaml

from buildsync.patterns import rules_for
from buildsync.scanner import DART_EXTENSION, scan

logger = logging.getLogger(__name__)

BUILD_YAML = "build.yaml"
BUILDERS_PATH = ("targets", "$default", "builders")
GENERATE_FOR = "generate_for"


class ConfigError(ValueError):
    pass


class ConfigNotFoundError(ConfigError):
    pass


class ConfigParseError(ConfigError):
    pass


class ConfigWriteError(ConfigError):
    pass


@dataclass(frozen=True)
class SyncReport:
    """What a synchronization wrote (or would write, on a dry run).

    `updated` holds each builder's entries as they appear in the normalized file.
    """

    path: Path
    updated: dict[str, list[str]] = field(default_factory=dict)
    skipped: tuple[str, ...] = ()
    written: bool = False


def _lookup(node: Any, *keys: str) -> Any:
    """
    Follow `keys` through nested mappings; None as soon as a segment is missing.
    """
    return reduce(lambda cur, key: cur.get(key) if isinstance(cur, dict) else None, keys, node)


def load_document(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigNotFoundError(f"Build configuration not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigParseError(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigParseError(f"{path} must contain a mapping at the top level.")
    return data


def dump_document(path: Path, document: dict[str, Any]) -> None:
    text = yaml.safe_dump(
        document,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=float("inf"),
    )
    path.write_text(text, encoding="utf-8")


def normalize_text(text: str, working_dir: str | Path) -> str:
    """
    Strip serializer quotes and the workdir prefix, and use forward slashes.

    Applied to the whole text, in that order. Running it twice changes nothing.
    """
    prefix = f"{working_dir}{os.sep}"
    return text.replace("'", "").replace(prefix, "").replace(os.sep, "/")


def normalize_file(path: Path, working_dir: str | Path) -> None:
    text = path.read_text(encoding="utf-8")
    path.write_text(normalize_text(text, working_dir), encoding="utf-8")


def synchronize(
    working_dir: str | Path,
    *,
    extension: str = DART_EXTENSION,
    dry_run: bool = False,
) -> SyncReport:
    workdir = Path(working_dir).resolve()
    path = workdir / BUILD_YAML
    logger.info("Generating %s for %s", BUILD_YAML, workdir)

    document = load_document(path)

    updated: dict[str, list[str]] = {}
    skipped: list[str] = []
    for rule in rules_for().values():
        files = scan(workdir, rule, extension=extension)
        builder = _lookup(document, *BUILDERS_PATH, rule.target_key)
        if not isinstance(builder, dict) or GENERATE_FOR not in builder:
            logger.debug("No %s.%s section in %s; skipping", rule.target_key, GENERATE_FOR, path)
            skipped.append(rule.target_key)
            continue
        builder[GENERATE_FOR] = files
        updated[rule.target_key] = [normalize_text(f, workdir) for f in files]
        logger.info("%s: %d file(s)", rule.target_key, len(files))

    if dry_run:
        logger.info("Dry run: %s left unchanged", path)
        return SyncReport(path=path, updated=updated, skipped=tuple(skipped), written=False)

    try:
        dump_document(path, document)
        normalize_file(path, workdir)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigWriteError(f"Cannot write {path}: {e}") from e
    logger.info("Successfully updated %s", BUILD_YAML)
    return SyncReport(path=path, updated=updated, skipped=tuple(skipped), written=True)
