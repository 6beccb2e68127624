"""
Record Parser — naive comma-delimited text → header + raw rows.

Rules:
  1. Split on "\n" (a trailing "\r" is dropped), drop blank / whitespace-only lines
  2. First surviving line is the header (trimmed, lower-cased)
  3. Every other line is split on "," with NO quoting support
  4. A row with fewer cells than the header is skipped silently

Known limitation: embedded delimiters and quoted fields are not supported.
A value such as "Smith, John" shifts every following column.
"""
from __future__ import annotations

from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger()

DELIMITER = ","


@dataclass(frozen=True)
class RawRow:
    row_index: int          # 1-based position among data lines (header excluded)
    cells: list[str]


@dataclass
class ParsedFile:
    headers: list[str] = field(default_factory=list)
    rows: list[RawRow] = field(default_factory=list)
    skipped_row_count: int = 0

    @property
    def data_line_count(self) -> int:
        return len(self.rows) + self.skipped_row_count


def split_lines(text: str) -> list[str]:
    # "\n" only: other Unicode line separators can sit inside a cell
    return [line.rstrip("\r") for line in text.split("\n") if line.strip()]


def parse_header(line: str) -> list[str]:
    return [h.strip().lower() for h in line.split(DELIMITER)]


def parse_records(text: str) -> ParsedFile:
    """
    Parse raw file content into a header row and the rows that are wide enough.
    """
    lines = split_lines(text)
    if not lines:
        return ParsedFile()

    headers = parse_header(lines[0])
    parsed = ParsedFile(headers=headers)

    for row_index, line in enumerate(lines[1:], start=1):
        cells = line.split(DELIMITER)
        if len(cells) < len(headers):
            parsed.skipped_row_count += 1
            logger.debug(
                "row_skipped",
                row_index=row_index,
                cell_count=len(cells),
                header_count=len(headers),
            )
            continue
        parsed.rows.append(RawRow(row_index=row_index, cells=cells))

    return parsed
