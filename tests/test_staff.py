import pytest

from feeflow.errors import CONFLICT, NOT_FOUND, VALIDATION
from feeflow.models import NonTeacherUser, TeacherUser
from feeflow.schemas import NON_TEACHER_HEADERS, TEACHER_HEADERS
from feeflow.staff import NON_TEACHER, TEACHER, StaffRepository


@pytest.fixture
def staff(client, policy, sleeps):
    return StaffRepository(client, policy, sleep=sleeps.append)


@pytest.fixture
def seeded(sheets_service):
    sheets_service.add_sheet('Admin', [
        ['Username', 'Password', 'Role'],
        ['head', 'secret', ''],
    ])
    sheets_service.add_sheet('Teachers', [
        TEACHER_HEADERS,
        ['Esi Owusu', 'BS 1', 'Teacher', 'Active', 'esi', 'pw1', '0244000001', 'Tafo', '01/09/2020', '', 'Yes'],
        ['Kwame Asare', 'BS 2', '', 'INACTIVE', 'kwame', 'pw2'],
        ['', '', '', '', ''],
    ])
    return sheets_service


def test_reads_teachers_with_defaults(staff, seeded):
    teachers = staff.get_teacher_users()
    assert [t.username for t in teachers] == ['esi', 'kwame']
    assert teachers[0].status == 'active'
    assert teachers[0].admin_privileges == 'Yes'
    assert teachers[1].status == 'inactive'
    assert teachers[1].role == 'Teacher'
    assert 'password' not in teachers[0].public_dict()


def test_admin_role_defaults(staff, seeded):
    admins = staff.get_admin_users()
    assert admins[0].username == 'head'
    assert admins[0].role == 'Admin'


def test_find_user_searches_every_sheet(staff, seeded):
    assert staff.find_user('ESI').name == 'Esi Owusu'
    assert staff.find_user('head').password == 'secret'
    assert staff.find_user('nobody') is None


def test_missing_sheet_reads_as_empty(staff, sleeps):
    assert staff.get_non_teacher_users() == []
    assert sleeps == [2, 4]


def test_add_staff_creates_sheet_and_rejects_duplicates(staff, sheets_service):
    user = NonTeacherUser(username='ama', name='Ama Serwaa', department='Accounts', role='Bursar')
    assert staff.add_staff(NON_TEACHER, user).success
    assert sheets_service.rows('Non-Teaching')[0] == NON_TEACHER_HEADERS
    assert sheets_service.rows('Non-Teaching')[1][:5] == ['Ama Serwaa', 'Accounts', 'Bursar', 'active', 'ama']

    again = staff.add_staff(NON_TEACHER, user)
    assert again.kind == CONFLICT
    assert len(sheets_service.rows('Non-Teaching')) == 2

    assert staff.add_staff(NON_TEACHER, NonTeacherUser(username='')).kind == VALIDATION


def test_update_only_changes_named_fields(staff, seeded):
    result = staff.update_staff_by_username(TEACHER, 'kwame', status='Inactive', contact='0200000000')
    assert result.success
    row = seeded.rows('Teachers')[2]
    assert row[:7] == ['Kwame Asare', 'BS 2', '', 'inactive', 'kwame', 'pw2', '0200000000']

    assert staff.update_staff_by_username(TEACHER, 'kwame', shoe_size='9').kind == VALIDATION
    assert staff.update_staff_by_username(TEACHER, 'ghost', name='x').kind == NOT_FOUND


def test_delete_staff_removes_row(staff, seeded):
    assert staff.delete_staff(TEACHER, 'esi').success
    assert [t.username for t in staff.get_teacher_users()] == ['kwame']
    assert staff.delete_staff(TEACHER, 'esi').kind == NOT_FOUND


def test_added_teacher_reads_back(staff, seeded):
    staff.add_staff(TEACHER, TeacherUser(username='yaa', name='Yaa Asantewaa', class_name='BS 3'))
    added = staff.find_user('yaa')
    assert added.class_name == 'BS 3'
    assert added.admin_privileges == 'No'


def test_username_is_not_editable(staff, seeded):
    result = staff.update_staff_by_username(TEACHER, 'kwame', username='esi')
    assert result.kind == VALIDATION
    assert [t.username for t in staff.get_teacher_users()] == ['esi', 'kwame']
    assert seeded.rows('Teachers')[2][4] == 'kwame'
