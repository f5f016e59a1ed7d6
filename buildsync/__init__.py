"""
buildsync package

This package keeps a Flutter project's `build.yaml` generator targets in sync
with the annotations found in its Dart sources, then runs the build pipeline.

Key responsibilities are split across modules:
- `patterns.py`: fixed annotation -> detection rule registry
- `parts.py`: resolve `part of` fragments to their owning file
- `scanner.py`: walk the source tree and collect annotated files
- `sync.py`: load, patch, write and normalize `build.yaml`
- `runner.py`: external tool probe and the sequential build pipeline
- `scaffold.py`: render a starter `build.yaml`
- `cli.py`: CLI entrypoint and orchestration (probe -> sync -> pipeline)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
