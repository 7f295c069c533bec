"""
Upsert Resolver: keep at most one live row per business key.

Keys are tuples of cell values at fixed 0-based column positions. Row
numbers handed around here are 1-based sheet rows; row 1 is the header.
"""
from .app_logger import get_logger
from .errors import CONFLICT, NOT_FOUND, TRANSPORT, VALIDATION, WriteResult
from .mapper import cell, normalize_header, text
from .sheets.a1 import row_range

logger = get_logger(__name__)

CREATED = 'created'
UPDATED = 'updated'


def key_of(row, key_columns):
    return tuple(text(cell(row, i)) for i in key_columns)


def find_row_numbers(rows, key_columns, key):
    """1-based row numbers of data rows (row 2 onward) matching key"""
    key = tuple(text(v) for v in key)
    return [
        number
        for number, row in enumerate(rows[1:], start=2)
        if key_of(row, key_columns) == key
    ]


def has_header(rows, headers, key_columns):
    """True when row 1 carries the expected header text at every key column"""
    if not rows:
        return False
    first = rows[0]
    return all(
        normalize_header(cell(first, i)) == normalize_header(headers[i])
        for i in key_columns
    )


def _read_existing(client, sheet):
    """Rows of the sheet, [] for a newly created sheet, or a failed WriteResult"""
    read = client.read_range(sheet)
    if read.success:
        return read.data
    ensured = client.ensure_sheet_exists(sheet)
    if not ensured.success:
        return WriteResult.fail(TRANSPORT, ensured.message)
    if ensured.data.get('created'):
        return []
    return WriteResult.fail(TRANSPORT, read.message)


def _bootstrap(client, sheet, headers, row):
    written = client.update_range(sheet, row_range(1, len(headers)), [list(headers)])
    if not written.success:
        return WriteResult.fail(TRANSPORT, written.message)
    appended = client.append_rows(sheet, [row])
    if not appended.success:
        return WriteResult.fail(TRANSPORT, appended.message)
    logger.info('Initialised %s with header and first row', sheet)
    return WriteResult.ok(f'Created {sheet} and saved row', {'action': CREATED, 'row': 2})


def upsert_row(client, sheet, headers, row, key_columns=(0,)):
    """Update the row whose key matches, otherwise append it"""
    key = key_of(row, key_columns)
    if not all(key):
        return WriteResult.fail(VALIDATION, f'Cannot save to {sheet} without a key value')

    rows = _read_existing(client, sheet)
    if isinstance(rows, WriteResult):
        return rows
    if not rows:
        return _bootstrap(client, sheet, headers, row)

    if not has_header(rows, headers, key_columns):
        logger.error('Refusing to write to %s: populated sheet has no header row', sheet)
        return WriteResult.fail(
            CONFLICT,
            f'Sheet {sheet} has data but no header row; add the header before saving',
        )

    matches = find_row_numbers(rows, key_columns, key)
    if len(matches) > 1:
        logger.error('Duplicate key %s in %s at rows %s', key, sheet, matches)
        return WriteResult.fail(CONFLICT, f'Key {"/".join(key)} appears in {len(matches)} rows of {sheet}')

    if matches:
        number = matches[0]
        written = client.write_row(sheet, number, row)
        if not written.success:
            return WriteResult.fail(TRANSPORT, written.message)
        logger.info('Updated %s row %d for key %s', sheet, number, key)
        return WriteResult.ok(f'Updated {"/".join(key)} in {sheet}', {'action': UPDATED, 'row': number})

    appended = client.append_rows(sheet, [row])
    if not appended.success:
        return WriteResult.fail(TRANSPORT, appended.message)
    number = len(rows) + 1
    logger.info('Appended %s row %d for key %s', sheet, number, key)
    return WriteResult.ok(f'Created {"/".join(key)} in {sheet}', {'action': CREATED, 'row': number})


def update_by_key(client, sheet, key_columns, key, changes, width=None):
    """Apply {column index: value} changes to the single row matching key"""
    read = client.read_range(sheet)
    if not read.success:
        return WriteResult.fail(TRANSPORT, read.message)
    matches = find_row_numbers(read.data, key_columns, key)
    if not matches:
        return WriteResult.fail(NOT_FOUND, f'{"/".join(key)} not found in {sheet}')
    if len(matches) > 1:
        return WriteResult.fail(CONFLICT, f'Key {"/".join(key)} appears in {len(matches)} rows of {sheet}')

    number = matches[0]
    row = list(read.data[number - 1])
    size = max([len(row), (width or 0)] + [i + 1 for i in changes])
    row.extend([''] * (size - len(row)))
    for index, value in changes.items():
        row[index] = value
    written = client.write_row(sheet, number, row)
    if not written.success:
        return WriteResult.fail(TRANSPORT, written.message)
    return WriteResult.ok(f'Updated {"/".join(key)} in {sheet}', {'action': UPDATED, 'row': number, 'values': row})


def delete_rows(client, sheet, row_numbers):
    """Hard-delete rows, highest first so earlier deletes don't shift later targets"""
    deleted = []
    for number in sorted(set(row_numbers), reverse=True):
        result = client.delete_row(sheet, number)
        if not result.success:
            return WriteResult.fail(
                TRANSPORT,
                f'{result.message} (deleted {len(deleted)} of {len(set(row_numbers))} rows)',
            )
        deleted.append(number)
    return WriteResult.ok(f'Deleted {len(deleted)} rows from {sheet}', {'rows': deleted})


def delete_by_keys(client, sheet, key_columns, keys):
    """Hard-delete every row matching any of the keys"""
    read = client.read_range(sheet)
    if not read.success:
        return WriteResult.fail(TRANSPORT, read.message)
    row_numbers = []
    for key in keys:
        row_numbers.extend(find_row_numbers(read.data, key_columns, key))
    if not row_numbers:
        return WriteResult.fail(NOT_FOUND, f'No matching rows in {sheet}')
    return delete_rows(client, sheet, row_numbers)


def clear_by_key(client, sheet, key_columns, key, width):
    """Soft delete: blank the matching row in place"""
    read = client.read_range(sheet)
    if not read.success:
        return WriteResult.fail(TRANSPORT, read.message)
    matches = find_row_numbers(read.data, key_columns, key)
    if not matches:
        return WriteResult.fail(NOT_FOUND, f'{"/".join(key)} not found in {sheet}')
    for number in matches:
        cleared = client.clear_range(sheet, row_range(number, width))
        if not cleared.success:
            return WriteResult.fail(TRANSPORT, cleared.message)
    return WriteResult.ok(f'Cleared {"/".join(key)} in {sheet}', {'rows': matches})
