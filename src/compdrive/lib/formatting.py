"""Shared text alignment primitives for driver output.

Statistics tables and help listings both rely on these so that column
alignment is computed the same way everywhere.
"""

from __future__ import annotations


def pad_left(text: str, width: int) -> str:
    """Left-pad with spaces up to `width`; never truncates.

    >>> pad_left("3", 3)
    '  3'
    """
    return text.rjust(width)


def pad_right(text: str, width: int) -> str:
    """Right-pad with spaces up to `width`; never truncates.

    >>> pad_right("Files:", 8)
    'Files:  '
    """
    return text.ljust(width)


def tabular(rows: list[list[str]], sep: str = "  ") -> list[str]:
    """Align columns by max width per column, returning one string per row.

    >>> tabular([["-h, --help", "Print this message."], ["--all", "Show all."]])
    ['-h, --help  Print this message.', '--all       Show all.']
    """
    if not rows:
        return []
    col_count = max(len(row) for row in rows)
    col_widths = [
        max((len(row[col]) if col < len(row) else 0) for row in rows)
        for col in range(col_count)
    ]
    lines: list[str] = []
    for row in rows:
        cells = [
            pad_right(row[col] if col < len(row) else "", col_widths[col])
            for col in range(col_count)
        ]
        lines.append(sep.join(cells).rstrip())
    return lines
