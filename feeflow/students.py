"""
Student roster read from the Metadata sheet through the CSV export
"""
import hashlib
import time

from .app_logger import get_logger
from .mapper import text
from .models import Student
from .retry import retry_read
from .schemas import STUDENT_COLUMNS, STUDENTS_SHEET

logger = get_logger(__name__)

GENDERS = ('Male', 'Female')


def name_hash(name):
    return hashlib.sha1(name.lower().encode('utf-8')).hexdigest()[:8]


def student_id(row_number, name, index):
    return f'{row_number}-{name_hash(name)}-{index}'


def build_student(row_number, index, values):
    """Turn one mapped Metadata row into a Student"""
    school_fees_paid = values['initial_amount_paid'] + values['payment']
    gender = values['gender'] if values['gender'] in GENDERS else 'Other'
    return Student(
        id=student_id(row_number, values['student_name'], index),
        student_name=values['student_name'],
        class_name=values['class_name'],
        gender=gender,
        student_type=values['student_type'],
        guardian_name=values['guardian_name'],
        guardian_phone=values['guardian_phone'],
        fees=values['fees'],
        books=values['books'],
        arrears=values['arrears'],
        school_fees_paid=school_fees_paid,
        books_fee_paid=values['books_fee_payment'],
        # Total Balance on the sheet is authoritative, never recomputed
        balance=values['balance'],
        amount_paid=school_fees_paid + values['books_fee_payment'],
        row_number=row_number,
    )


def rows_to_students(rows):
    students = []
    for index, (row_number, values) in enumerate(STUDENT_COLUMNS.map_rows(rows)):
        if not (values['student_name'] and values['class_name']):
            continue
        students.append(build_student(row_number, index, values))
    return students


class StudentRepository:
    def __init__(self, source, policy=None, sleep=time.sleep):
        self.source = source
        self.policy = policy
        self.sleep = sleep

    def get_all_students(self):
        rows = retry_read(
            lambda: self.source.fetch_rows(STUDENTS_SHEET),
            default=list,
            policy=self.policy,
            description='fetch students',
            sleep=self.sleep,
        )
        students = rows_to_students(rows)
        logger.info('Loaded %d students', len(students))
        return students

    def get_classes(self):
        return sorted({s.class_name for s in self.get_all_students() if s.class_name})

    def get_students_by_class(self, class_name):
        wanted = text(class_name)
        return [s for s in self.get_all_students() if s.class_name == wanted]

    def get_student_by_id(self, student_id):
        for student in self.get_all_students():
            if student.id == student_id:
                return student
        return None

    def get_total_students_count(self):
        return len(self.get_all_students())
