"""
Table parsing for story data.

Turns spreadsheet-exported delimited text into an ordered list of
SceneRecords. The format is loose on purpose: whatever a spreadsheet
writes out should load.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence

from visual_novel.story.records import SCENE_FIELDS, SceneRecord

logger = logging.getLogger(__name__)


# Delimiter strategy: "auto" counts "," and ";" in the header line and
# picks ";" only when it strictly outnumbers ",".
DELIMITER_STRATEGY = "auto"
DEFAULT_DELIMITER = ","
ALT_DELIMITER = ";"

# A data row must split into more than one field to be kept.
MIN_ROW_FIELDS = 2

BYTE_ORDER_MARK = "\ufeff"
QUOTE = '"'


@dataclass
class ParsedRow:
    """A data row after splitting, before it becomes a record."""

    fields: list[str]
    line_number: int = 0


def detect_delimiter(header_line: str) -> str:
    """Pick the delimiter from the header line."""
    if header_line.count(ALT_DELIMITER) > header_line.count(DEFAULT_DELIMITER):
        return ALT_DELIMITER
    return DEFAULT_DELIMITER


def split_row(line: str, delimiter: str) -> list[str]:
    """Split a line on `delimiter`, ignoring delimiters inside double quotes.

    Only a matched pair of quotes protects delimiters: a quote with no
    closing quote later on the line is plain text. Quotes are kept in
    the output; unquoting happens per field.
    """
    fields = []
    current = []
    in_quotes = False
    last_quote = line.rfind(QUOTE)

    for i, char in enumerate(line):
        if char == QUOTE:
            if in_quotes or i < last_quote:
                in_quotes = not in_quotes
            current.append(char)
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields


def clean_field(raw: str) -> str:
    """Trim, strip one wrapping quote pair, collapse doubled quotes."""
    value = raw.strip()
    if len(value) >= 2 and value.startswith(QUOTE) and value.endswith(QUOTE):
        value = value[1:-1]
    return value.replace(QUOTE * 2, QUOTE)


def format_field(value: str, delimiter: str) -> str:
    """Quote a value for output if it holds the delimiter or a quote."""
    if delimiter in value or QUOTE in value:
        return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE
    return value


class TableParser:
    """Parse delimited story tables into scene records.

    Example:
        parser = TableParser()

        table = '''id,text,option1,target1
        start,"Hello, traveller",Go on,road
        road,The road ends here.,,
        '''

        records = parser.parse(table)
        records[0].text         # "Hello, traveller"
        parser.skipped_rows     # 0
    """

    def __init__(self, min_row_fields: int = MIN_ROW_FIELDS):
        """Initialize parser.

        Args:
            min_row_fields: Fewest fields a data row needs to be kept.
        """
        self.min_row_fields = min_row_fields
        self.delimiter = DEFAULT_DELIMITER
        self.headers: list[str] = []
        self.skipped_rows = 0

    def parse(self, raw_text: str) -> list[SceneRecord]:
        """Parse a whole table.

        Args:
            raw_text: Table text, header row first.

        Returns:
            Records in input order. Empty when nothing usable was found.
        """
        self.skipped_rows = 0
        lines = self._split_lines(raw_text)
        if not lines:
            self.headers = []
            return []

        self.delimiter = detect_delimiter(lines[0])
        self.headers = self._parse_header(lines[0])

        records = []
        for row in self._parse_rows(lines[1:]):
            records.append(self._to_record(row))

        logger.debug(
            "Parsed %d scenes (%d rows skipped, delimiter %r)",
            len(records), self.skipped_rows, self.delimiter,
        )
        return records

    def _split_lines(self, raw_text: str) -> list[str]:
        text = raw_text.strip()
        if not text:
            return []
        return text.split("\n")

    def _parse_header(self, line: str) -> list[str]:
        headers = [clean_field(h) for h in split_row(line, self.delimiter)]
        if headers:
            headers[0] = headers[0].lstrip(BYTE_ORDER_MARK).strip()
        return [h.lower() for h in headers]

    def _parse_rows(self, lines: Sequence[str]) -> Iterator[ParsedRow]:
        for i, line in enumerate(lines, 2):
            if not line.strip():
                continue

            fields = split_row(line, self.delimiter)
            if len(fields) < self.min_row_fields:
                self.skipped_rows += 1
                logger.debug("Skipping line %d: %d field(s)", i, len(fields))
                continue

            yield ParsedRow([clean_field(f) for f in fields], line_number=i)

    def _to_record(self, row: ParsedRow) -> SceneRecord:
        values = {}
        for index, header in enumerate(self.headers):
            values[header] = row.fields[index] if index < len(row.fields) else ""
        return SceneRecord(values)


def parse_table(raw_text: str, **kwargs) -> list[SceneRecord]:
    """Convenience function to parse a table.

    Args:
        raw_text: Table text.
        **kwargs: Parser options.

    Returns:
        List of SceneRecords.
    """
    return TableParser(**kwargs).parse(raw_text)


def format_row(
    record: SceneRecord,
    headers: Sequence[str] = SCENE_FIELDS,
    delimiter: str = DEFAULT_DELIMITER,
) -> str:
    """Serialise a record back into one delimited line."""
    return delimiter.join(
        format_field(record.get(header, ""), delimiter) for header in headers
    )


def format_table(
    records: Sequence[SceneRecord],
    headers: Sequence[str] = SCENE_FIELDS,
    delimiter: str = DEFAULT_DELIMITER,
) -> str:
    """Serialise records into a table with a header row."""
    lines = [delimiter.join(headers)]
    lines.extend(format_row(r, headers, delimiter) for r in records)
    return "\n".join(lines) + "\n"


__all__ = [
    "DELIMITER_STRATEGY",
    "MIN_ROW_FIELDS",
    "TableParser",
    "ParsedRow",
    "detect_delimiter",
    "split_row",
    "clean_field",
    "format_field",
    "format_row",
    "format_table",
    "parse_table",
]
