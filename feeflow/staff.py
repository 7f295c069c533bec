"""
Staff accounts: Teachers, Non-Teaching and Admin sheets.

Teachers and Non-Teaching rows are keyed by username (column E) and are
hard-deleted. The Admin sheet is read-only here.
"""
import time

from .app_logger import get_logger
from .errors import CONFLICT, VALIDATION, WriteResult
from .mapper import text
from .models import AdminUser, NonTeacherUser, TeacherUser
from .retry import retry_read
from .schemas import (
    ADMIN_COLUMNS, ADMIN_SHEET, NON_TEACHER_COLUMNS, NON_TEACHING_SHEET,
    STAFF_KEY, TEACHER_COLUMNS, TEACHERS_SHEET,
)
from .upsert import delete_by_keys, find_row_numbers, update_by_key, upsert_row

logger = get_logger(__name__)

TEACHER = 'teacher'
NON_TEACHER = 'non-teacher'

STAFF_KINDS = {
    TEACHER: (TEACHERS_SHEET, TEACHER_COLUMNS, TeacherUser),
    NON_TEACHER: (NON_TEACHING_SHEET, NON_TEACHER_COLUMNS, NonTeacherUser),
}


def normalize_status(value):
    return 'inactive' if text(value).lower() == 'inactive' else 'active'


class StaffRepository:
    def __init__(self, client, policy=None, sleep=time.sleep):
        self.client = client
        self.policy = policy
        self.sleep = sleep

    def _read(self, sheet, columns, model):
        rows = retry_read(
            lambda: self.client.fetch_rows(sheet),
            default=list,
            policy=self.policy,
            description=f'fetch {sheet}',
            sleep=self.sleep,
        )
        users = []
        for _, values in columns.map_rows(rows):
            if not values['username']:
                continue
            if 'status' in values:
                values['status'] = normalize_status(values['status'])
            users.append(model(**{k: v for k, v in values.items() if v != '' or k == 'username'}))
        return users

    def get_teacher_users(self):
        return self._read(TEACHERS_SHEET, TEACHER_COLUMNS, TeacherUser)

    def get_non_teacher_users(self):
        return self._read(NON_TEACHING_SHEET, NON_TEACHER_COLUMNS, NonTeacherUser)

    def get_admin_users(self):
        return self._read(ADMIN_SHEET, ADMIN_COLUMNS, AdminUser)

    def find_user(self, username):
        """Look a username up across Admin, Teachers and Non-Teaching"""
        wanted = text(username).lower()
        for users in (self.get_admin_users(), self.get_teacher_users(), self.get_non_teacher_users()):
            for user in users:
                if user.username.lower() == wanted:
                    return user
        return None

    def add_staff(self, kind, user):
        """Append a new staff row; an existing username is a conflict"""
        sheet, columns, _ = STAFF_KINDS[kind]
        if not text(user.username):
            return WriteResult.fail(VALIDATION, 'Username is required')
        read = self.client.read_range(sheet)
        if read.success and find_row_numbers(read.data, STAFF_KEY, (user.username,)):
            return WriteResult.fail(CONFLICT, f'Username {user.username} already exists in {sheet}')
        row = columns.record_to_row(user.to_dict())
        result = upsert_row(self.client, sheet, columns.headers, row, STAFF_KEY)
        if result.success:
            logger.info('Added %s %s', kind, user.username)
        return result

    def update_staff_by_username(self, kind, current_username, **fields):
        """Partial update; only the named fields change. The username itself is the key and stays put."""
        sheet, columns, _ = STAFF_KINDS[kind]
        index = {c.field: c.index for c in columns.columns}
        unknown = set(fields) - set(index)
        if unknown:
            return WriteResult.fail(VALIDATION, f'Unknown fields: {", ".join(sorted(unknown))}')
        if 'username' in fields:
            return WriteResult.fail(VALIDATION, 'Username cannot be changed; delete and re-add the account')
        if 'status' in fields:
            fields['status'] = normalize_status(fields['status'])
        changes = {index[name]: value for name, value in fields.items()}
        return update_by_key(self.client, sheet, STAFF_KEY, (current_username,), changes, width=columns.width)

    def delete_staff(self, kind, username):
        sheet, _, _ = STAFF_KINDS[kind]
        result = delete_by_keys(self.client, sheet, STAFF_KEY, [(username,)])
        if result.success:
            logger.info('Deleted %s %s', kind, username)
        return result
