"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

BUILD_YAML = """\
targets:
  $default:
    builders:
      copy_with_extension_gen:
        generate_for: []
      json_serializable:
        options:
          explicit_to_json: true
        generate_for:
          - lib/stale.dart
      hive_generator:
        generate_for: []
      freezed:
        enabled: true
"""


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def write_file():
    def _write(path: Path, content: str | bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def project(tmp_path: Path, write_file) -> Path:
    """A Flutter-like project root with a build.yaml declaring every builder."""
    root = tmp_path.resolve() / "app"
    write_file(root / "build.yaml", BUILD_YAML)
    return root
