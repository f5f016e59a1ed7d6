"""
cli.py

Responsibility: CLI entrypoint for buildsync.

High-level flow (default command `run`):
1) Probe the build tool on PATH (fails before `build.yaml` is touched)
2) Synchronize `build.yaml` generator targets with the Dart sources
3) Run the build pipeline: clean -> pub upgrade -> pub get -> build_runner

This module should orchestrate behavior but keep concerns isolated:
- Annotation rules: `patterns.py`
- Scanning: `scanner.py` / `parts.py`
- Document patching: `sync.py`
- External processes: `runner.py`
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from buildsync import __version__
from buildsync.runner import DEFAULT_TOOL, RunnerError, probe_tool, run_pipeline
from buildsync.scaffold import ScaffoldError, write_build_yaml
from buildsync.scanner import DART_EXTENSION, ScanIOError
from buildsync.sync import ConfigError, synchronize

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class CLIError(RuntimeError):
    pass


def _setup_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    else:
        level = (args.log_level or os.environ.get("BUILDSYNC_LOG_LEVEL") or "INFO").upper()
    if level not in logging.getLevelNamesMapping():
        raise CLIError(f"Unknown log level: {level}")
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def _workdir(args: argparse.Namespace) -> Path:
    workdir = Path(args.workdir or Path.cwd()).resolve()
    if not workdir.is_dir():
        raise CLIError(f"Working directory does not exist: {workdir}")
    return workdir


def _tool(args: argparse.Namespace) -> str:
    return args.tool or os.environ.get("BUILDSYNC_TOOL") or DEFAULT_TOOL


def run_cmd(args: argparse.Namespace) -> int:
    workdir = _workdir(args)
    tool = None if args.skip_pipeline else probe_tool(_tool(args))

    synchronize(workdir, extension=args.extension)

    if tool is None:
        logger.info("Skipping build pipeline")
        return 0
    run_pipeline(tool.path, cwd=workdir)
    logger.info("Build pipeline finished")
    return 0


def sync_cmd(args: argparse.Namespace) -> int:
    report = synchronize(_workdir(args), extension=args.extension, dry_run=bool(args.dry_run))
    if args.dry_run:
        for key, files in report.updated.items():
            print(f"{key}:")
            for f in files:
                print(f"  - {f}")
        for key in report.skipped:
            print(f"{key}: (no generate_for section, skipped)")
    return 0


def init_cmd(args: argparse.Namespace) -> int:
    path = write_build_yaml(_workdir(args), overwrite=bool(args.overwrite))
    logger.info("Wrote %s", path)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="buildsync",
        description="Sync build.yaml generator targets with Dart annotations, then run the Flutter build",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--workdir", default=None, help="Project directory containing build.yaml (default: cwd)")
    p.add_argument("--extension", default=DART_EXTENSION, help=f"Source file extension to scan (default: {DART_EXTENSION})")
    p.add_argument("--log-level", default=None, help="Log level (or set env BUILDSYNC_LOG_LEVEL; default: INFO)")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    sub = p.add_subparsers(dest="command")

    r = sub.add_parser("run", help="Probe the build tool, sync build.yaml, run the build pipeline (default)")
    r.add_argument("--tool", default=None, help=f"Build tool executable (or set env BUILDSYNC_TOOL; default: {DEFAULT_TOOL})")
    r.add_argument("--skip-pipeline", action="store_true", help="Only sync build.yaml; do not run the build tool")
    r.set_defaults(func=run_cmd)

    s = sub.add_parser("sync", help="Only sync build.yaml generator targets")
    s.add_argument("--dry-run", action="store_true", help="Print the scanned targets without writing build.yaml")
    s.set_defaults(func=sync_cmd)

    i = sub.add_parser("init", help="Write a starter build.yaml with every known builder section")
    i.add_argument("--overwrite", action="store_true", help="Replace an existing build.yaml")
    i.set_defaults(func=init_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args([*argv, "run"])

    try:
        _setup_logging(args)
        return int(args.func(args))
    except (ConfigError, ScanIOError, RunnerError, ScaffoldError, CLIError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
