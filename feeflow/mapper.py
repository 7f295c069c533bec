"""
Row <-> record mapping.

Each sheet kind declares one ColumnMap: an ordered list of Columns naming
the record field, the header text to look for, the fixed position to use
when the sheet has no header (or the header is not found), and a parser.
One generic function turns rows into field dicts for every sheet.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple

_NON_NUMERIC = re.compile(r'[^0-9.\-]')
_SPACES = re.compile(r'\s+')

TRUE_WORDS = ('true', 'yes', 'y', '1', 'paid', 'active')


def text(value):
    if value is None:
        return ''
    return str(value).strip()


def parse_currency(value):
    """'GHS 1,200.50' -> 1200.5; blanks and junk -> 0.0"""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value == value else 0.0
    cleaned = _NON_NUMERIC.sub('', text(value))
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if number == number else 0.0


def parse_bool(value):
    if isinstance(value, bool):
        return value
    return text(value).lower() in TRUE_WORDS


def format_bool(value):
    return 'TRUE' if value else 'FALSE'


def normalize_header(value):
    """Lower-case, collapse whitespace and drop a trailing colon"""
    return _SPACES.sub(' ', text(value).lower()).rstrip(':').strip()


def cell(row, index):
    """Cell at a 0-based index, '' when the row is short"""
    if index is None or index < 0 or index >= len(row):
        return ''
    value = row[index]
    return '' if value is None else value


@dataclass(frozen=True)
class Column:
    field: str
    header: Optional[str] = None
    index: Optional[int] = None
    parser: Callable = text
    aliases: Tuple[str, ...] = ()

    def names(self):
        names = [self.header] if self.header else []
        return [normalize_header(n) for n in names + list(self.aliases)]


@dataclass
class ColumnMap:
    columns: Sequence[Column]
    headers: Sequence[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.headers:
            ordered = sorted((c for c in self.columns if c.index is not None), key=lambda c: c.index)
            self.headers = [c.header or c.field for c in ordered]

    @property
    def width(self):
        return len(self.headers)

    def resolve(self, header_row=None):
        """Map each field to a 0-based column index.

        With a header row, fields are found by header text; the fixed index
        is used only where that column has no header text of its own.
        Without a header row, only fixed indexes are used.
        """
        lookup = {}
        if header_row:
            for position, name in enumerate(header_row):
                lookup.setdefault(normalize_header(name), position)
        positions = {}
        for column in self.columns:
            found = None
            for name in column.names():
                if name in lookup:
                    found = lookup[name]
                    break
            if found is None and not (header_row and text(cell(header_row, column.index))):
                found = column.index
            positions[column.field] = found
        return positions

    def row_to_record(self, row, positions):
        record = {}
        for column in self.columns:
            record[column.field] = column.parser(cell(row, positions.get(column.field)))
        return record

    def map_rows(self, rows, has_header=True):
        """Yield (row_number, record) for every data row; row_number is 1-based"""
        if not rows:
            return
        header_row = rows[0] if has_header else None
        positions = self.resolve(header_row)
        start = 1 if has_header else 0
        for offset, row in enumerate(rows[start:], start=start + 1):
            if not any(text(v) for v in row):
                continue
            yield offset, self.row_to_record(row, positions)

    def record_to_row(self, values):
        """Lay values out by fixed column position for writing"""
        row = [''] * self.width
        for column in self.columns:
            if column.index is None or column.field not in values:
                continue
            value = values[column.field]
            if isinstance(value, bool):
                value = format_bool(value)
            elif value is None:
                value = ''
            row[column.index] = value
        return row
