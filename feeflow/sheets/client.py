"""
Sheet Access Client: the single authenticated channel to the spreadsheet.

Every primitive returns a SheetResult instead of raising so callers can
decide their own fallback policy. Only construction from settings raises,
since missing credentials mean nothing can ever succeed.
"""
import httplib2
from google.auth.exceptions import GoogleAuthError
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..app_logger import get_logger
from ..config import require_spreadsheet_id
from ..errors import SheetAccessError, SheetResult
from .a1 import a1_range, column_letter, row_range
from .credentials import load_credentials

logger = get_logger(__name__)

DEFAULT_RANGE = 'A1:Z1000'
VALUE_INPUT_OPTION = 'USER_ENTERED'

TRANSPORT_ERRORS = (HttpError, httplib2.HttpLib2Error, GoogleAuthError, OSError)


def http_status(exc):
    resp = getattr(exc, 'resp', None)
    status = getattr(resp, 'status', None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def error_message(exc):
    if isinstance(exc, HttpError):
        reason = getattr(exc, 'reason', None)
        if not reason:
            content = exc.content or b''
            reason = content.decode('utf-8', 'replace') if isinstance(content, bytes) else str(content)
        return f"HTTP {http_status(exc)}: {reason}"
    return f"{type(exc).__name__}: {exc}"


class SheetClient:
    """Wraps the Sheets API v4 values and batchUpdate calls for one spreadsheet"""

    def __init__(self, spreadsheet_id, service, default_range=DEFAULT_RANGE):
        self.spreadsheet_id = spreadsheet_id
        self.service = service
        self.default_range = default_range

    @classmethod
    def from_settings(cls, config):
        """Build an authorised client from a Flask config mapping"""
        spreadsheet_id = require_spreadsheet_id(config)
        credentials = load_credentials(
            config.get('SHEETS_SCOPES', ['https://www.googleapis.com/auth/spreadsheets']),
            client_email=config.get('GOOGLE_SERVICE_ACCOUNT_EMAIL'),
            private_key=config.get('GOOGLE_PRIVATE_KEY'),
            key_file=config.get('GOOGLE_SERVICE_ACCOUNT_FILE'),
        )
        http = AuthorizedHttp(credentials, http=httplib2.Http(timeout=config.get('SHEETS_TIMEOUT', 30)))
        service = build('sheets', 'v4', http=http, cache_discovery=False)
        return cls(spreadsheet_id, service, config.get('SHEETS_DEFAULT_RANGE', DEFAULT_RANGE))

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    def _values(self):
        return self.service.spreadsheets().values()

    def _run(self, description, request):
        """Execute a prepared API request, translating transport errors"""
        try:
            return True, request.execute()
        except TRANSPORT_ERRORS as exc:
            message = error_message(exc)
            logger.error('%s failed: %s', description, message)
            return False, message

    def _batch_update(self, description, requests):
        return self._run(description, self.service.spreadsheets().batchUpdate(
            spreadsheetId=self.spreadsheet_id,
            body={'requests': requests},
        ))

    # ------------------------------------------------------------------
    # values
    # ------------------------------------------------------------------
    def read_range(self, sheet, cells=None):
        target = a1_range(sheet, cells or self.default_range)
        ok, response = self._run(f'read {target}', self._values().get(
            spreadsheetId=self.spreadsheet_id,
            range=target,
        ))
        if not ok:
            return SheetResult(False, f'Failed to read {sheet}: {response}', [])
        rows = response.get('values', [])
        logger.debug('Read %d rows from %s', len(rows), target)
        return SheetResult(True, f'Read {len(rows)} rows from {sheet}', rows)

    def fetch_rows(self, sheet, cells=None):
        """Like read_range but raises SheetAccessError, for use under retry"""
        result = self.read_range(sheet, cells)
        if not result.success:
            raise SheetAccessError(sheet, result.message)
        return result.data

    def append_rows(self, sheet, rows):
        if not rows:
            return SheetResult(False, 'No rows to append', None)
        ok, response = self._run(f'append to {sheet}', self._values().append(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range(sheet, 'A1'),
            valueInputOption=VALUE_INPUT_OPTION,
            insertDataOption='INSERT_ROWS',
            body={'values': rows},
        ))
        if not ok:
            return SheetResult(False, f'Failed to append to {sheet}: {response}', None)
        updates = response.get('updates', {})
        return SheetResult(True, f'Appended {len(rows)} rows to {sheet}', {
            'updated_range': updates.get('updatedRange'),
            'updated_rows': updates.get('updatedRows', len(rows)),
        })

    def update_range(self, sheet, cells, rows):
        target = a1_range(sheet, cells)
        ok, response = self._run(f'update {target}', self._values().update(
            spreadsheetId=self.spreadsheet_id,
            range=target,
            valueInputOption=VALUE_INPUT_OPTION,
            body={'values': rows},
        ))
        if not ok:
            return SheetResult(False, f'Failed to update {target}: {response}', None)
        return SheetResult(True, f'Updated {target}', {
            'updated_range': response.get('updatedRange', target),
            'updated_cells': response.get('updatedCells'),
        })

    def clear_range(self, sheet, cells):
        """Blank cell contents without shifting rows"""
        target = a1_range(sheet, cells)
        ok, response = self._run(f'clear {target}', self._values().clear(
            spreadsheetId=self.spreadsheet_id,
            range=target,
            body={},
        ))
        if not ok:
            return SheetResult(False, f'Failed to clear {target}: {response}', None)
        return SheetResult(True, f'Cleared {target}', {'cleared_range': response.get('clearedRange', target)})

    # ------------------------------------------------------------------
    # structure
    # ------------------------------------------------------------------
    def list_sheets(self):
        ok, response = self._run('list sheets', self.service.spreadsheets().get(
            spreadsheetId=self.spreadsheet_id,
            fields='sheets.properties',
        ))
        if not ok:
            return SheetResult(False, f'Failed to list sheets: {response}', [])
        sheets = [
            {'title': s['properties']['title'], 'sheet_id': s['properties']['sheetId']}
            for s in response.get('sheets', [])
        ]
        return SheetResult(True, f'Found {len(sheets)} sheets', sheets)

    def _lookup_sheet_id(self, sheet):
        listing = self.list_sheets()
        if not listing.success:
            return listing
        for entry in listing.data:
            if entry['title'] == sheet:
                return SheetResult(True, '', entry['sheet_id'])
        return SheetResult(False, f'Sheet "{sheet}" not found', None)

    def delete_row(self, sheet, row_number):
        """Physically remove one 1-based row; rows below shift up"""
        if row_number < 1:
            return SheetResult(False, f'Invalid row number {row_number}', None)
        lookup = self._lookup_sheet_id(sheet)
        if not lookup.success:
            return lookup
        ok, response = self._batch_update(f'delete row {row_number} of {sheet}', [{
            'deleteDimension': {
                'range': {
                    'sheetId': lookup.data,
                    'dimension': 'ROWS',
                    'startIndex': row_number - 1,
                    'endIndex': row_number,
                }
            }
        }])
        if not ok:
            return SheetResult(False, f'Failed to delete row {row_number} of {sheet}: {response}', None)
        logger.info('Deleted row %d of %s', row_number, sheet)
        return SheetResult(True, f'Deleted row {row_number} of {sheet}', {'row': row_number})

    def insert_row_at(self, sheet, row_number, rows):
        """Insert rows before a 1-based row number and fill them"""
        if row_number < 1 or not rows:
            return SheetResult(False, 'Invalid insert request', None)
        lookup = self._lookup_sheet_id(sheet)
        if not lookup.success:
            return lookup
        ok, response = self._batch_update(f'insert at row {row_number} of {sheet}', [{
            'insertDimension': {
                'range': {
                    'sheetId': lookup.data,
                    'dimension': 'ROWS',
                    'startIndex': row_number - 1,
                    'endIndex': row_number - 1 + len(rows),
                },
                'inheritFromBefore': row_number > 1,
            }
        }])
        if not ok:
            return SheetResult(False, f'Failed to insert rows into {sheet}: {response}', None)
        width = max(len(r) for r in rows)
        last_row = row_number + len(rows) - 1
        cells = f'A{row_number}:{column_letter(max(width, 1))}{last_row}'
        written = self.update_range(sheet, cells, rows)
        if not written.success:
            return written
        return SheetResult(True, f'Inserted {len(rows)} rows at {row_number} of {sheet}', {'row': row_number})

    def ensure_sheet_exists(self, sheet):
        """Create a sheet unless it is already there"""
        listing = self.list_sheets()
        if not listing.success:
            return SheetResult(False, listing.message, None)
        for entry in listing.data:
            if entry['title'] == sheet:
                return SheetResult(True, f'Sheet "{sheet}" exists', {'created': False, 'sheet_id': entry['sheet_id']})

        ok, response = self._batch_update(f'add sheet {sheet}', [{
            'addSheet': {'properties': {'title': sheet}}
        }])
        if not ok:
            if 'already exists' in response:
                return SheetResult(True, f'Sheet "{sheet}" exists', {'created': False, 'sheet_id': None})
            return SheetResult(False, f'Failed to create sheet "{sheet}": {response}', None)
        replies = response.get('replies') or [{}]
        sheet_id = replies[0].get('addSheet', {}).get('properties', {}).get('sheetId')
        logger.info('Created sheet %s', sheet)
        return SheetResult(True, f'Created sheet "{sheet}"', {'created': True, 'sheet_id': sheet_id})

    def write_row(self, sheet, row_number, row):
        """Overwrite one row, sized to the row's own length"""
        return self.update_range(sheet, row_range(row_number, len(row)), [row])
