import pytest
import requests

from feeflow.errors import SheetAccessError
from feeflow.sheets.csv_export import CsvExportSource, parse_csv
from tests.fakes import FakeResponse, FakeSession


def test_quoted_commas_stay_in_one_field():
    rows = parse_csv('"NAME","GRADE"\n"Smith, John","BS 2"\n')
    assert rows == [['NAME', 'GRADE'], ['Smith, John', 'BS 2']]


def test_embedded_quotes_and_blank_lines():
    rows = parse_csv('a,b\n\n"He said ""hi""",2\n,\n')
    assert rows == [['a', 'b'], [], ['He said "hi"', '2'], ['', '']]


def test_fetch_rows_builds_export_request():
    session = FakeSession(FakeResponse(200, '"NAME"\n"Ama"\n', headers={'Content-Type': 'text/csv'}))
    source = CsvExportSource('abc123', session=session, timeout=30)

    assert source.fetch_rows('Metadata') == [['NAME'], ['Ama']]

    method, url, kwargs = session.requests[0]
    assert method == 'GET'
    assert url == 'https://docs.google.com/spreadsheets/d/abc123/gviz/tq'
    assert kwargs['params'] == {'tqx': 'out:csv', 'sheet': 'Metadata'}
    assert kwargs['timeout'] == 30


def test_http_errors_raise_sheet_access_error():
    source = CsvExportSource('abc123', session=FakeSession(FakeResponse(404)))
    with pytest.raises(SheetAccessError):
        source.fetch_rows('Metadata')


def test_html_login_page_is_not_csv():
    page = FakeResponse(200, '<html></html>', headers={'Content-Type': 'text/html; charset=utf-8'})
    source = CsvExportSource('abc123', session=FakeSession(page))
    with pytest.raises(SheetAccessError):
        source.fetch_rows('Config')


def test_timeouts_raise_sheet_access_error():
    source = CsvExportSource('abc123', session=FakeSession(requests.Timeout('read timed out')))
    with pytest.raises(SheetAccessError) as excinfo:
        source.fetch_rows('Config')
    assert excinfo.value.sheet == 'Config'
