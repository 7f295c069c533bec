"""
Read-only access to sheets through the public CSV export endpoint.

Used for low-stakes, frequently-read data (student roster, school config,
SMS templates). Failures raise SheetAccessError so the retry policy can
decide what to do.
"""
import csv
import io

import requests

from ..app_logger import get_logger
from ..errors import SheetAccessError

logger = get_logger(__name__)

EXPORT_PATH = '/spreadsheets/d/{spreadsheet_id}/gviz/tq'


def parse_csv(text):
    """Split CSV text into rows, honouring quoted fields such as "Smith, John".

    Blank lines are kept as empty rows so list positions stay aligned with
    sheet row numbers.
    """
    reader = csv.reader(io.StringIO(text))
    return [[cell.strip() for cell in row] for row in reader]


class CsvExportSource:
    def __init__(self, spreadsheet_id, host='https://docs.google.com', timeout=30, session=None):
        self.spreadsheet_id = spreadsheet_id
        self.host = host.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, config, session=None):
        return cls(
            config['GOOGLE_SHEET_ID'],
            host=config.get('SHEETS_EXPORT_HOST', 'https://docs.google.com'),
            timeout=config.get('SHEETS_TIMEOUT', 30),
            session=session,
        )

    def export_url(self):
        return self.host + EXPORT_PATH.format(spreadsheet_id=self.spreadsheet_id)

    def fetch_rows(self, sheet):
        try:
            response = self.session.get(
                self.export_url(),
                params={'tqx': 'out:csv', 'sheet': sheet},
                headers={'Accept': 'text/csv'},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SheetAccessError(sheet, f'CSV export request failed: {exc}') from exc

        if response.status_code != 200:
            raise SheetAccessError(sheet, f'CSV export returned HTTP {response.status_code}')

        content_type = response.headers.get('Content-Type', '')
        if 'text/html' in content_type:
            # A private sheet redirects to a sign-in page instead of CSV
            raise SheetAccessError(sheet, 'CSV export returned HTML; is the sheet shared?')

        rows = parse_csv(response.text)
        logger.debug('Fetched %d CSV rows from %s', len(rows), sheet)
        return rows
