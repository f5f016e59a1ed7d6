import logging
import subprocess
from pathlib import Path

import pytest

from buildsync import runner
from buildsync.runner import (
    PIPELINE,
    ExternalCommandFailedError,
    ExternalToolNotFoundError,
    PipelineStep,
    probe_tool,
    run_command,
    run_pipeline,
)


class FakeRun:
    """Records subprocess.run calls; fails commands whose argv contains `fail_on`."""

    def __init__(self, fail_on: str | None = None, stdout: str = "", stderr: str = "boom") -> None:
        self.calls: list[list[str]] = []
        self.fail_on = fail_on
        self.stdout = stdout
        self.stderr = stderr

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        code = 1 if self.fail_on and self.fail_on in cmd else 0
        return subprocess.CompletedProcess(cmd, code, stdout=self.stdout, stderr=self.stderr if code else "")


def test_run_command_success(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeRun(stdout="ok\n")
    monkeypatch.setattr(runner.subprocess, "run", fake)

    result = run_command(["flutter", "clean"], cwd=tmp_path)

    assert result.ok
    assert result.argv == ("flutter", "clean")
    assert result.stdout == "ok\n"
    assert result.elapsed_ms >= 0


def test_run_command_failure_carries_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(runner.subprocess, "run", FakeRun(fail_on="clean", stderr="no pubspec.yaml"))

    with pytest.raises(ExternalCommandFailedError) as exc:
        run_command(["flutter", "clean"])

    assert "no pubspec.yaml" in str(exc.value)
    assert exc.value.result is not None
    assert exc.value.result.returncode == 1


def test_run_command_launch_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(runner.subprocess, "run", _raise)

    with pytest.raises(ExternalCommandFailedError):
        run_command(["missing-tool"])


def test_probe_tool_not_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(runner.shutil, "which", lambda name: None)

    with pytest.raises(ExternalToolNotFoundError) as exc:
        probe_tool("flutter")

    assert "Install Flutter" in str(exc.value)


def test_probe_tool_reports_path_and_version(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeRun(stdout="Flutter 3.24.0 • channel stable\nFramework • revision abc\n")
    monkeypatch.setattr(runner.shutil, "which", lambda name: f"/opt/flutter/bin/{name}")
    monkeypatch.setattr(runner.subprocess, "run", fake)

    info = probe_tool("flutter")

    assert info.path == "/opt/flutter/bin/flutter"
    assert info.version == "Flutter 3.24.0 • channel stable"
    assert fake.calls == [["/opt/flutter/bin/flutter", "--version"]]


def test_pipeline_runs_steps_in_order(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeRun()
    monkeypatch.setattr(runner.subprocess, "run", fake)

    results = run_pipeline("flutter", cwd=tmp_path)

    assert len(results) == len(PIPELINE)
    assert fake.calls == [
        ["flutter", "clean"],
        ["flutter", "pub", "upgrade"],
        ["flutter", "pub", "get"],
        ["flutter", "pub", "run", "build_runner", "build", "--delete-conflicting-outputs"],
    ]


def test_pipeline_aborts_on_first_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeRun(fail_on="upgrade", stderr="version solving failed")
    monkeypatch.setattr(runner.subprocess, "run", fake)

    with pytest.raises(ExternalCommandFailedError, match="version solving failed"):
        run_pipeline("flutter")

    assert fake.calls == [["flutter", "clean"], ["flutter", "pub", "upgrade"]]


def test_pipeline_custom_steps(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeRun()
    monkeypatch.setattr(runner.subprocess, "run", fake)

    run_pipeline("dart", steps=[PipelineStep(("format", "."), "Formatting")])

    assert fake.calls == [["dart", "format", "."]]


def test_successful_output_is_logged_at_debug(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    monkeypatch.setattr(runner.subprocess, "run", FakeRun(stdout="[INFO] Succeeded after 4.2s with 12 outputs\n"))

    with caplog.at_level(logging.DEBUG, logger="buildsync.runner"):
        run_pipeline("flutter", steps=[PipelineStep(("pub", "run", "build_runner", "build"), "Running code generation")])

    assert "Succeeded after 4.2s with 12 outputs" in caplog.text
