"""
Parent and guardian accounts on the MobileUsers sheet.

Rows are read through the CSV export and appended through the API.
Username and contact number must each be unique across the sheet.
"""
import time
import uuid
from datetime import datetime

from .app_logger import get_logger
from .errors import CONFLICT, VALIDATION, WriteResult
from .mapper import text
from .models import MobileUser
from .retry import retry_read
from .schemas import MOBILE_USER_COLUMNS, MOBILE_USER_HEADERS, MOBILE_USER_KEY, MOBILE_USERS_SHEET
from .upsert import upsert_row

logger = get_logger(__name__)

REQUIRED_FIELDS = ('name', 'contact', 'username', 'password')
DEFAULT_ROLE = 'parent'


def new_mobile_user_id():
    return f'mobile_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}'


def rows_to_mobile_users(rows):
    users = []
    for _, values in MOBILE_USER_COLUMNS.map_rows(rows):
        if not values['username']:
            continue
        values['role'] = values['role'] or DEFAULT_ROLE
        users.append(MobileUser(**values))
    return users


class MobileUserRepository:
    def __init__(self, source, client, policy=None, sleep=time.sleep):
        self.source = source
        self.client = client
        self.policy = policy
        self.sleep = sleep

    def get_mobile_users(self):
        rows = retry_read(
            lambda: self.source.fetch_rows(MOBILE_USERS_SHEET),
            default=list,
            policy=self.policy,
            description='fetch mobile users',
            sleep=self.sleep,
        )
        return rows_to_mobile_users(rows)

    def register_mobile_user(self, user):
        """Append a new account; a taken username or contact number is a conflict"""
        missing = [name for name in REQUIRED_FIELDS if not text(getattr(user, name))]
        if missing:
            return WriteResult.fail(VALIDATION, f'Missing required fields: {", ".join(missing)}')

        # Checked against the API read, not the CSV export
        read = self.client.read_range(MOBILE_USERS_SHEET)
        existing = rows_to_mobile_users(read.data) if read.success else []
        if any(u.username == text(user.username) for u in existing):
            return WriteResult.fail(CONFLICT, f'Username {user.username} already exists')
        if any(u.contact == text(user.contact) for u in existing):
            return WriteResult.fail(CONFLICT, f'Contact {user.contact} is already registered')

        stamp = datetime.now().isoformat(timespec='seconds')
        user.id = new_mobile_user_id()
        user.role = user.role or DEFAULT_ROLE
        user.is_active = True
        user.created_at = user.updated_at = stamp

        row = MOBILE_USER_COLUMNS.record_to_row(user.to_dict())
        result = upsert_row(self.client, MOBILE_USERS_SHEET, MOBILE_USER_HEADERS, row, MOBILE_USER_KEY)
        if not result.success:
            return result
        logger.info('Registered mobile user %s', user.username)
        result.data['user'] = user.public_dict()
        return result
