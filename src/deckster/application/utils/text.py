"""Text helpers for turning pasted or exported card lists into (front, back) rows."""

from typing import Literal

Separator = Literal["comma", "tab"]

_DELIMITERS: dict[str, str] = {"comma": ",", "tab": "\t"}


def parse_card_lines(text: str, separator: Separator = "comma") -> list[tuple[str, str]]:
    """
    Split each non-blank line on the separator and keep the first two fields.

    Lines with fewer than two fields are dropped. Fields beyond the second are
    ignored. No quoting rules apply: a comma inside the front text splits it.
    """
    if separator not in _DELIMITERS:
        raise ValueError(f"Unknown separator: {separator}")
    delimiter = _DELIMITERS[separator]

    rows: list[tuple[str, str]] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = line.split(delimiter)
        if len(parts) >= 2:
            rows.append((parts[0].strip(), parts[1].strip()))
    return rows
