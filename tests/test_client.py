import httplib2
import pytest

from feeflow.errors import SheetAccessError
from feeflow.sheets.client import SheetClient, error_message, http_status
from tests.fakes import FakeSheetsService, http_error


@pytest.fixture
def service():
    return FakeSheetsService({
        'Claims': [['Invoice Number', 'Guardian Name'], ['INV-1', 'Kofi'], ['INV-2', 'Esi']],
        'SBA Config': [['Campus:', 'Duase']],
    })


@pytest.fixture
def sheet_client(service):
    return SheetClient('sheet-id', service)


def test_read_range_defaults_to_wide_bounds(sheet_client):
    result = sheet_client.read_range('Claims')
    assert result.success
    assert result.data == [['Invoice Number', 'Guardian Name'], ['INV-1', 'Kofi'], ['INV-2', 'Esi']]


def test_read_range_quotes_titles_with_spaces(sheet_client):
    result = sheet_client.read_range('SBA Config', 'A1:B1')
    assert result.data == [['Campus:', 'Duase']]


def test_read_failure_is_soft(sheet_client, service):
    service.broken = True
    result = sheet_client.read_range('Claims')
    assert not result.success
    assert result.data == []
    assert 'HTTP 503' in result.message


def test_missing_sheet_reads_as_failure(sheet_client):
    result = sheet_client.read_range('Nope')
    assert not result.success
    with pytest.raises(SheetAccessError):
        sheet_client.fetch_rows('Nope')


def test_append_and_update(sheet_client, service):
    assert sheet_client.append_rows('Claims', [['INV-3', 'Ama']]).success
    assert sheet_client.update_range('Claims', 'B2:B2', [['Kofi Mensah']]).success
    assert service.rows('Claims')[1] == ['INV-1', 'Kofi Mensah']
    assert service.rows('Claims')[3] == ['INV-3', 'Ama']


def test_clear_range_keeps_row_positions(sheet_client, service):
    assert sheet_client.clear_range('Claims', 'A2:B2').success
    rows = service.rows('Claims')
    assert len(rows) == 3
    assert rows[1] == []


def test_delete_row_resolves_sheet_id(sheet_client, service):
    result = sheet_client.delete_row('Claims', 2)
    assert result.success
    assert service.rows('Claims') == [['Invoice Number', 'Guardian Name'], ['INV-2', 'Esi']]
    assert service.calls[-2:] == ['spreadsheets.get', 'batchUpdate']


def test_delete_row_on_unknown_sheet(sheet_client):
    result = sheet_client.delete_row('Missing', 2)
    assert not result.success
    assert 'not found' in result.message


def test_insert_row_at_shifts_rows_down(sheet_client, service):
    result = sheet_client.insert_row_at('Claims', 2, [['INV-0', 'Yaw']])
    assert result.success
    assert [r[0] for r in service.rows('Claims')] == ['Invoice Number', 'INV-0', 'INV-1', 'INV-2']


def test_ensure_sheet_exists_is_idempotent(sheet_client, service):
    first = sheet_client.ensure_sheet_exists('SBA')
    second = sheet_client.ensure_sheet_exists('SBA')
    assert first.success and first.data['created'] is True
    assert second.success and second.data['created'] is False
    assert list(service.sheets).count('SBA') == 1
    assert service.calls.count('batchUpdate') == 1


def test_list_sheets(sheet_client):
    titles = [s['title'] for s in sheet_client.list_sheets().data]
    assert titles == ['Claims', 'SBA Config']


def test_error_helpers():
    exc = http_error(429, 'Quota exceeded')
    assert http_status(exc) == 429
    assert 'Quota exceeded' in error_message(exc)
    assert error_message(httplib2.HttpLib2Error('boom')) == 'HttpLib2Error: boom'
