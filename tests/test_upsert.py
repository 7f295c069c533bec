from feeflow.errors import CONFLICT, NOT_FOUND, TRANSPORT
from feeflow.upsert import (
    CREATED, UPDATED, clear_by_key, delete_by_keys, delete_rows, find_row_numbers,
    update_by_key, upsert_row,
)

HEADERS = ['Key', 'Value']


def test_bootstraps_missing_sheet(client, sheets_service):
    result = upsert_row(client, 'Ledger', HEADERS, ['K1', 'first'])
    assert result.success
    assert result.data == {'action': CREATED, 'row': 2}
    assert sheets_service.rows('Ledger') == [HEADERS, ['K1', 'first']]


def test_bootstraps_empty_existing_sheet(client, sheets_service):
    sheets_service.add_sheet('Ledger')
    result = upsert_row(client, 'Ledger', HEADERS, ['K1', 'first'])
    assert result.data['action'] == CREATED
    assert sheets_service.rows('Ledger') == [HEADERS, ['K1', 'first']]


def test_upsert_is_idempotent_per_key(client, sheets_service):
    upsert_row(client, 'Ledger', HEADERS, ['K1', 'first'])
    upsert_row(client, 'Ledger', HEADERS, ['K2', 'other'])
    result = upsert_row(client, 'Ledger', HEADERS, ['K1', 'second'])

    assert result.data == {'action': UPDATED, 'row': 2}
    assert sheets_service.rows('Ledger') == [HEADERS, ['K1', 'second'], ['K2', 'other']]


def test_composite_keys(client, sheets_service):
    headers = ['Student', 'Subject', 'Score']
    upsert_row(client, 'Marks', headers, ['S1', 'Maths', '50'], key_columns=(0, 1))
    upsert_row(client, 'Marks', headers, ['S1', 'English', '60'], key_columns=(0, 1))
    upsert_row(client, 'Marks', headers, ['S1', 'Maths', '70'], key_columns=(0, 1))
    assert sheets_service.rows('Marks')[1:] == [['S1', 'Maths', '70'], ['S1', 'English', '60']]


def test_refuses_populated_sheet_without_header(client, sheets_service):
    sheets_service.add_sheet('Ledger', [['K9', 'legacy']])
    result = upsert_row(client, 'Ledger', HEADERS, ['K1', 'first'])
    assert not result.success
    assert result.kind == CONFLICT
    assert sheets_service.rows('Ledger') == [['K9', 'legacy']]


def test_duplicate_rows_are_reported(client, sheets_service):
    sheets_service.add_sheet('Ledger', [HEADERS, ['K1', 'a'], ['K1', 'b']])
    result = upsert_row(client, 'Ledger', HEADERS, ['K1', 'c'])
    assert result.kind == CONFLICT
    assert '2 rows' in result.message


def test_write_failure_is_reported_not_swallowed(client, sheets_service):
    sheets_service.add_sheet('Ledger', [HEADERS])
    sheets_service.broken = True
    result = upsert_row(client, 'Ledger', HEADERS, ['K1', 'first'])
    assert not result.success
    assert result.kind == TRANSPORT


def test_update_by_key_changes_only_named_cells(client, sheets_service):
    sheets_service.add_sheet('Ledger', [['Key', 'A', 'B'], ['K1', 'x', 'y']])
    result = update_by_key(client, 'Ledger', (0,), ('K1',), {2: 'z', 4: 'far'})
    assert result.success
    assert sheets_service.rows('Ledger')[1] == ['K1', 'x', 'z', '', 'far']


def test_update_by_key_not_found(client, sheets_service):
    sheets_service.add_sheet('Ledger', [HEADERS])
    assert update_by_key(client, 'Ledger', (0,), ('K1',), {1: 'v'}).kind == NOT_FOUND


def _ten_rows():
    return [['Key']] + [[f'R{n}'] for n in range(2, 11)]


def test_batch_delete_removes_exactly_the_targets(client, sheets_service):
    sheets_service.add_sheet('Ledger', _ten_rows())
    result = delete_rows(client, 'Ledger', [3, 7, 2])

    assert result.success
    assert result.data == {'rows': [7, 3, 2]}
    survivors = [r[0] for r in sheets_service.rows('Ledger')[1:]]
    assert survivors == ['R4', 'R5', 'R6', 'R8', 'R9', 'R10']


def test_low_to_high_order_would_hit_the_wrong_rows(client, sheets_service):
    sheets_service.add_sheet('Ledger', _ten_rows())
    for number in (2, 3, 7):
        client.delete_row('Ledger', number)
    survivors = [r[0] for r in sheets_service.rows('Ledger')[1:]]
    assert survivors != ['R4', 'R5', 'R6', 'R8', 'R9', 'R10']


def test_delete_by_keys(client, sheets_service):
    sheets_service.add_sheet('Ledger', _ten_rows())
    result = delete_by_keys(client, 'Ledger', (0,), [('R3',), ('R9',), ('missing',)])
    assert result.data == {'rows': [9, 3]}
    assert find_row_numbers(sheets_service.rows('Ledger'), (0,), ('R3',)) == []


def test_delete_by_keys_none_found(client, sheets_service):
    sheets_service.add_sheet('Ledger', _ten_rows())
    assert delete_by_keys(client, 'Ledger', (0,), [('nope',)]).kind == NOT_FOUND


def test_clear_by_key_blanks_in_place(client, sheets_service):
    sheets_service.add_sheet('Ledger', [HEADERS, ['K1', 'a'], ['K2', 'b']])
    result = clear_by_key(client, 'Ledger', (0,), ('K1',), width=2)
    assert result.success
    assert sheets_service.rows('Ledger') == [HEADERS, [], ['K2', 'b']]
