"""
Code Sink — Switchable, indentation-aware writer for generated code.

Statements written to the same line are joined with "; ". Blocks open on
a line of their own and indent everything up to the matching close; an
empty block receives a `pass`. While output is suppressed every write is
accepted and dropped, which is how one side of a yield split is removed.
"""

from __future__ import annotations

from typing import Optional


class CodeSink:
    """Collects generated Python statements."""

    def __init__(self, indent: str = "    ", level: int = 1) -> None:
        self.indent = indent
        self.base_level = level
        self._level = level
        self._lines: list[str] = []
        self._current: list[str] = []
        self._block_statements: list[int] = []
        self._suppressed = False

    # -- suppression ---------------------------------------------------------

    def enable_output(self) -> None:
        self._suppressed = False

    def disable_output(self) -> None:
        self._suppressed = True

    def is_suppressing(self) -> bool:
        return self._suppressed

    # -- writing -------------------------------------------------------------

    def write(self, statement: str) -> None:
        """Append a statement to the current line."""
        if self._suppressed:
            return
        self._current.append(statement)
        if self._block_statements:
            self._block_statements[-1] += 1

    def println(self) -> None:
        """End the current line."""
        if self._suppressed:
            return
        self._flush_line()

    def begin_block(self, header: str) -> None:
        """Write a block header such as `for x in y:` and indent."""
        if self._suppressed:
            self._level += 1
            return
        self._flush_line(skip_empty=True)
        self._lines.append(self.indent * self._level + header)
        if self._block_statements:
            self._block_statements[-1] += 1
        self._block_statements.append(0)
        self._level += 1

    def end_block(self, trailer: Optional[str] = None) -> None:
        """Close the innermost block, then write `trailer` on its own line."""
        if self._suppressed:
            self._level -= 1
            return
        self._flush_line(skip_empty=True)
        if self._block_statements.pop() == 0:
            self._lines.append(self.indent * self._level + "pass")
        self._level -= 1
        if trailer:
            self._lines.append(self.indent * self._level + trailer)

    def finish(self) -> None:
        """End the current line whether or not output is suppressed."""
        self._flush_line()

    def _flush_line(self, skip_empty: bool = False) -> None:
        if skip_empty and not self._current:
            return
        line = "; ".join(self._current)
        self._lines.append(self.indent * self._level + line if line else "")
        self._current = []

    # -- checkpoints ---------------------------------------------------------

    def mark(self) -> tuple:
        """Snapshot of everything a run can change, for rollback()."""
        return (
            len(self._lines),
            list(self._current),
            self._level,
            list(self._block_statements),
            self._suppressed,
        )

    def rollback(self, mark: tuple) -> None:
        """Drop whatever was written since `mark` and restore its state."""
        lines, current, level, block_statements, suppressed = mark
        del self._lines[lines:]
        self._current = list(current)
        self._level = level
        self._block_statements = list(block_statements)
        self._suppressed = suppressed

    # -- results -------------------------------------------------------------

    def getvalue(self) -> str:
        """Everything written so far, an open line included."""
        lines = list(self._lines)
        if self._current:
            lines.append(self.indent * self._level + "; ".join(self._current))
        return "".join(line + "\n" for line in lines)

    def drain(self) -> str:
        """Return everything written so far and start over at the base level."""
        text = self.getvalue()
        self._lines = []
        self._current = []
        self._block_statements = []
        self._level = self.base_level
        return text
