"""
runner.py

Responsibility: every external process this tool starts goes through here.

- `probe_tool`: fail fast when the build tool is not on PATH
- `run_command`: one synchronous, timed invocation with captured output
- `run_pipeline`: the fixed build sequence, aborting on the first failure

There are no timeouts and no retries; each command runs exactly once.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

DEFAULT_TOOL = "flutter"
INSTALL_HINT = "Install Flutter (https://docs.flutter.dev/get-started/install) and make sure it is on your PATH."


class RunnerError(RuntimeError):
    pass


class ExternalToolNotFoundError(RunnerError):
    pass


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    elapsed_ms: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ExternalCommandFailedError(RunnerError):
    def __init__(self, message: str, result: CommandResult | None = None) -> None:
        super().__init__(message)
        self.result = result


@dataclass(frozen=True)
class ToolInfo:
    name: str
    path: str
    version: str


@dataclass(frozen=True)
class PipelineStep:
    args: tuple[str, ...]
    description: str


PIPELINE: tuple[PipelineStep, ...] = (
    PipelineStep(("clean",), "Cleaning build outputs"),
    PipelineStep(("pub", "upgrade"), "Upgrading dependencies"),
    PipelineStep(("pub", "get"), "Fetching dependencies"),
    PipelineStep(
        ("pub", "run", "build_runner", "build", "--delete-conflicting-outputs"),
        "Running code generation",
    ),
)


def run_command(argv: Sequence[str], *, cwd: str | Path | None = None) -> CommandResult:
    """
    Run `argv` to completion, raising ExternalCommandFailedError on a non-zero exit.
    """
    cmd = [str(a) for a in argv]
    display = " ".join(cmd)
    logger.debug("Running: %s", display)

    start = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise ExternalCommandFailedError(f"Command could not be started: {display}: {e}") from e
    elapsed_ms = int((time.monotonic() - start) * 1000)

    result = CommandResult(
        argv=tuple(cmd),
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        elapsed_ms=elapsed_ms,
    )
    if not result.ok:
        raise ExternalCommandFailedError(
            f"Command failed (exit {result.returncode}): {display}\n\n{result.stderr}",
            result,
        )
    logger.debug("Finished %s in %d ms", display, elapsed_ms)
    if result.stdout.strip():
        logger.debug("%s output:\n%s", display, result.stdout.rstrip())
    return result


def probe_tool(name: str = DEFAULT_TOOL) -> ToolInfo:
    """
    Resolve `name` on PATH and check that `<name> --version` succeeds.
    """
    path = shutil.which(name)
    if path is None:
        raise ExternalToolNotFoundError(f"'{name}' was not found on PATH. {INSTALL_HINT}")

    result = run_command([path, "--version"])
    lines = result.stdout.strip().splitlines()
    version = lines[0] if lines else ""
    logger.info("Using %s at %s (%s)", name, path, version or "unknown version")
    return ToolInfo(name=name, path=path, version=version)


def run_pipeline(
    executable: str,
    *,
    cwd: str | Path | None = None,
    steps: Sequence[PipelineStep] = PIPELINE,
) -> list[CommandResult]:
    results: list[CommandResult] = []
    for step in steps:
        logger.info("%s: %s %s", step.description, Path(executable).name, " ".join(step.args))
        result = run_command([executable, *step.args], cwd=cwd)
        logger.info("%s done in %.1fs", step.description, result.elapsed_ms / 1000)
        results.append(result)
    return results
