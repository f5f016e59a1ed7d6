"""
scaffold.py

Responsibility: write a starter `build.yaml` that declares every builder
section the synchronizer knows how to fill.

The synchronizer only replaces existing `generate_for` lists, so a new project
needs these sections in place before its first run.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, StrictUndefined

from buildsync.patterns import rules_for
from buildsync.sync import BUILD_YAML

BUILD_YAML_TEMPLATE = """\
targets:
  $default:
    builders:
{%- for rule in rules %}
      {{ rule.target_key }}:
        generate_for: []
{%- endfor %}
"""


class ScaffoldError(RuntimeError):
    pass


def render_build_yaml() -> str:
    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    template = env.from_string(BUILD_YAML_TEMPLATE)
    return template.render(rules=list(rules_for().values()))


def write_build_yaml(working_dir: str | Path, *, overwrite: bool = False) -> Path:
    path = Path(working_dir) / BUILD_YAML
    if path.exists() and not overwrite:
        raise ScaffoldError(f"{path} already exists (use --overwrite to replace it)")
    path.write_text(render_build_yaml(), encoding="utf-8", newline="\n")
    return path
