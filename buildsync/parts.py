"""
parts.py

Responsibility: map an annotated Dart fragment to the file that owns it.

A file declaring `part of <name>;` is compiled as part of `<name>`, so code
generation has to be requested for the owner rather than the fragment.
"""

from __future__ import annotations

from pathlib import Path

PART_OF_MARKER = "part of "


def resolve(file_path: Path, content: str) -> Path:
    """
    Return the sibling `<name>` for a `part of <name>;` declaration, else `file_path`.

    The name is taken verbatim up to the next `;` (whitespace trimmed). A marker
    with no terminating semicolon is treated as absent.
    """
    idx = content.find(PART_OF_MARKER)
    if idx == -1:
        return file_path

    after = content[idx + len(PART_OF_MARKER) :]
    end = after.find(";")
    if end == -1:
        return file_path

    parent_name = after[:end].strip()
    return file_path.parent / parent_name
