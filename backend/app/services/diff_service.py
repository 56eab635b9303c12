"""
Line diff for the fixed-code view.

`generate` is a display heuristic, not a minimal edit script: it walks both
line lists once with a single line of lookahead. When a multi-line insertion
or deletion shifts the alignment by more than one line, rows are reported as
`unchanged` with the original content even though the lines differ. The
presentation layer depends on this exact shape, so it is kept as is.

`unified` renders a conventional `difflib` unified diff for export.
"""

from __future__ import annotations

import difflib
from typing import List

from ..models.accessibility import DiffLine, DiffLineType


def _at(lines: List[str], index: int) -> str:
    return lines[index] if 0 <= index < len(lines) else ""


class DiffGenerator:
    """Align original and fixed code into typed display rows."""

    def generate(self, original: str, fixed: str) -> List[DiffLine]:
        original_lines = original.split("\n")
        fixed_lines = fixed.split("\n")

        diff: List[DiffLine] = []
        i = 0
        j = 0
        while i < len(original_lines) or j < len(fixed_lines):
            original_line = _at(original_lines, i)
            fixed_line = _at(fixed_lines, j)

            if original_line == fixed_line:
                diff.append(DiffLine(type=DiffLineType.UNCHANGED, content=original_line, line_number=i + 1))
                i += 1
                j += 1
            elif i >= len(original_lines):
                diff.append(DiffLine(type=DiffLineType.ADDED, content=fixed_line, line_number=j + 1))
                j += 1
            elif j >= len(fixed_lines):
                diff.append(DiffLine(type=DiffLineType.REMOVED, content=original_line, line_number=i + 1))
                i += 1
            elif _at(original_lines, i + 1) == _at(fixed_lines, j + 1):
                # Next lines line up again: treat this pair as a one-line substitution
                diff.append(DiffLine(type=DiffLineType.REMOVED, content=original_line, line_number=i + 1))
                diff.append(DiffLine(type=DiffLineType.ADDED, content=fixed_line, line_number=j + 1))
                i += 1
                j += 1
            else:
                diff.append(DiffLine(type=DiffLineType.UNCHANGED, content=original_line, line_number=i + 1))
                i += 1
                j += 1

        return diff

    def unified(self, original: str, fixed: str, context: int = 3) -> str:
        """Unified diff text (empty when nothing changed)."""
        return "\n".join(
            difflib.unified_diff(
                original.splitlines(),
                fixed.splitlines(),
                fromfile="before",
                tofile="after",
                n=context,
                lineterm="",
            )
        )
