"""
Quote-aware tokenizer for one line of the CSV export.

A double quote toggles "inside quotes" mode and is dropped from the output;
a comma inside quotes is literal text. Doubled quotes are not unescaped and
a quoted field cannot span physical lines.
"""

import re
from typing import List


_LINE_BREAK = re.compile(r"\r?\n")


def parse_csv_line(line: str) -> List[str]:
    """
    Split a single line into trimmed field values.

    Args:
        line: One physical line of text (no line terminator needed)

    Returns:
        Ordered list of field values; an empty line yields ``[""]``

    Example:
        >>> parse_csv_line('477,"From Spark, To Blazor",2025-08-25')
        ['477', 'From Spark, To Blazor', '2025-08-25']
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def split_lines(raw_text: str) -> List[str]:
    """
    Split a payload into physical lines, accepting LF and CRLF endings.

    Leading and trailing whitespace of the whole payload is dropped first, so
    a trailing newline does not produce an empty last line.
    """
    return _LINE_BREAK.split(raw_text.strip())
