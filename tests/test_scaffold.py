from pathlib import Path

import pytest
import yaml

from buildsync.scaffold import ScaffoldError, render_build_yaml, write_build_yaml
from buildsync.sync import synchronize


def test_rendered_yaml_declares_every_builder() -> None:
    data = yaml.safe_load(render_build_yaml())
    assert data == {
        "targets": {
            "$default": {
                "builders": {
                    "copy_with_extension_gen": {"generate_for": []},
                    "json_serializable": {"generate_for": []},
                    "hive_generator": {"generate_for": []},
                }
            }
        }
    }


def test_write_refuses_existing_file(tmp_path: Path) -> None:
    (tmp_path / "build.yaml").write_text("targets: {}\n", encoding="utf-8")
    with pytest.raises(ScaffoldError):
        write_build_yaml(tmp_path)
    assert (tmp_path / "build.yaml").read_text(encoding="utf-8") == "targets: {}\n"


def test_write_then_sync(tmp_path: Path, write_file) -> None:
    root = tmp_path.resolve()
    write_build_yaml(root)
    write_file(root / "lib/item.dart", "@JsonSerializable()\nclass Item {}")

    report = synchronize(root)

    assert report.skipped == ()
    assert report.updated["json_serializable"] == ['"lib/item.dart"']
