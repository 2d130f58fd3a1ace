"""Single-line CSV tokenizer.

Quoted fields may contain commas and ``""`` escapes, but never line breaks:
every call sees exactly one physical line.
"""

from __future__ import annotations

from typing import List


def parse_csv_line(line: str) -> List[str]:
    """Split ``line`` into trimmed field values."""

    values: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(line)
    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    values.append("".join(current))
    return [value.strip() for value in values]


__all__ = ["parse_csv_line"]
