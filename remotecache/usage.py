"""Help text for the command line: word wrapping and column alignment."""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass, field
from itertools import groupby
from typing import Optional, Sequence, TextIO

from remotecache.flags import Flag

# An arbitrarily large width that is never expected to be hit in practice.
DEFAULT_WIDTH = 10000

# Never wrap more narrowly than this.
MINIMUM_WIDTH = 30

_HEADER = "bazel-remote - A remote build cache for Bazel and other REAPI clients"
_HELP_LINE = "--help, -h\tshow help"
_OPTION_OFFSET = 6

_MIN_CELL_WIDTH = 1
_CELL_PADDING = 2


def wrap(text: str, offset: int, wrap_at: int) -> str:
    """Wrap possibly multiline text at word boundaries once it reaches wrap_at.

    Every line but the first is prefixed with `offset` spaces.
    """
    prefix = " " * offset
    wrapped = (wrap_line(line, wrap_at, prefix) for line in text.split("\n"))
    return ("\n" + prefix).join(wrapped)


def wrap_line(text: str, wrap_at: int, padding: str) -> str:
    """Wrap a single line at word boundaries, prefixing wrapped lines with padding.

    Whitespace is not preserved exactly.
    """
    offset = len(padding)
    if wrap_at <= offset:
        return text

    target_width = wrap_at - offset
    if len(text) <= target_width:
        return text

    words = text.split()
    if not words:
        return text

    wrapped = words[0]
    space_left = target_width - len(wrapped)
    for word in words[1:]:
        if len(word) + 1 > space_left:
            wrapped += "\n" + padding + word
            space_left = target_width - len(word)
        else:
            wrapped += " " + word
            space_left -= 1 + len(word)
    return wrapped


def _parse_width(text: str) -> Optional[int]:
    try:
        width = int(text.strip())
    except ValueError:
        return None
    return max(width, MINIMUM_WIDTH)


def get_console_width() -> int:
    """Return the console width from $COLUMNS or `tput cols`, at least MINIMUM_WIDTH."""
    columns = os.environ.get("COLUMNS", "")
    if columns:
        width = _parse_width(columns)
        if width is not None:
            return width

    stdin = sys.stdin if _has_fileno(sys.stdin) else None
    try:
        result = subprocess.run(
            ["tput", "cols"],
            stdin=stdin,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.SubprocessError, ValueError):
        return DEFAULT_WIDTH

    width = _parse_width(result.stdout)
    return DEFAULT_WIDTH if width is None else width


def _has_fileno(stream) -> bool:
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return False
    return True


@dataclass
class _Row:
    cells: list[str]
    widths: list[int] = field(default_factory=list)


def _size_columns(rows: list[_Row], column: int) -> None:
    for in_block, group in groupby(rows, key=lambda row: len(row.cells) - 1 > column):
        if not in_block:
            continue
        block = list(group)
        width = max(
            _MIN_CELL_WIDTH,
            max(len(row.cells[column]) for row in block) + _CELL_PADDING,
        )
        for row in block:
            row.widths.append(width)
        _size_columns(block, column + 1)


def _align_tabs(text: str) -> str:
    """Align tab-separated cells of consecutive lines into padded columns."""
    rows = [_Row(line.split("\t")) for line in text.split("\n")]
    _size_columns(rows, 0)
    return "\n".join(
        "".join(cell.ljust(width) for cell, width in zip(row.cells, row.widths))
        + row.cells[-1]
        for row in rows
    )


def render_help(app_name: str, flags: Sequence[Flag], width: Optional[int] = None) -> str:
    """Return the help text for app_name and its flags, wrapped at width."""
    if width is None:
        width = get_console_width()
    options = [wrap(flag.help_string(), _OPTION_OFFSET, width) for flag in flags]
    options.append(wrap(_HELP_LINE, _OPTION_OFFSET, width))
    text = (
        f"{_HEADER}\n\n"
        f"USAGE:\n   {app_name} [options]\n\n"
        "OPTIONS:\n   " + "\n\n   ".join(options) + "\n"
    )
    return _align_tabs(text)


def print_help(app_name: str, flags: Sequence[Flag], out: Optional[TextIO] = None) -> None:
    """Write the help text to out (standard output by default)."""
    stream = sys.stdout if out is None else out
    stream.write(render_help(app_name, flags))