"""A1 notation helpers"""
import re

_SIMPLE_TITLE = re.compile(r'^[A-Za-z0-9_]+$')


def quote_title(title):
    """Quote a sheet title for use in an A1 range when needed"""
    if _SIMPLE_TITLE.match(title):
        return title
    return "'" + title.replace("'", "''") + "'"


def column_letter(index):
    """1-based column number to letters, 1 -> A, 27 -> AA"""
    if index < 1:
        raise ValueError(f"column index must be >= 1, got {index}")
    letters = ''
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def a1_range(title, cells=None):
    if not cells:
        return quote_title(title)
    return f"{quote_title(title)}!{cells}"


def row_range(row_number, width, start_column=1):
    """Cell span covering one row, e.g. row_range(4, 12) -> 'A4:L4'"""
    first = column_letter(start_column)
    last = column_letter(start_column + max(width, 1) - 1)
    return f"{first}{row_number}:{last}{row_number}"
