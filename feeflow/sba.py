"""
School-Based Assessment (SBA) records, class score sheets and report config.

SBA rows are keyed by (student id, subject, term) and soft-deleted: a
deleted record is blanked in place so row positions used by printed
report cards never shift.
"""
import re
import time
import uuid
from datetime import datetime

from .app_logger import get_logger
from .errors import VALIDATION, WriteResult
from .grading import grade_for, percentage
from .mapper import cell, parse_currency, text
from .models import (
    SBAAssessment, SBAAssessmentRecord, SBAClassData, SBAClassRecord,
    SBAConfig, SBARecord,
)
from .retry import retry_read
from .schemas import SBA_COLUMNS, SBA_CONFIG_SHEET, SBA_HEADERS, SBA_KEY, SBA_SHEET
from .sheets.a1 import row_range
from .upsert import clear_by_key, upsert_row

logger = get_logger(__name__)

CLASS_SHEETS = {
    'Creche': 'SBA Creche',
    'BS 1': 'SBA BS1',
    'BS 2': 'SBA BS2',
    'BS 3': 'SBA BS3',
    'BS 4': 'SBA BS4',
    'BS 5': 'SBA BS5',
}

TOTALS_RANGE = 'N1:Q3'

# Averages assumed when a student has no assessment of that kind
DEFAULT_TEST_AVERAGE = 10
DEFAULT_EXAM_AVERAGE = 50
CLASS_SCORE_CAP = 30
EXAM_SCORE_WEIGHT = 70

_CONFIG_LABELS = (
    ('campus', re.compile(r'^Campus\b', re.I)),
    ('total_attendance', re.compile(r'^Total Attendance\b', re.I)),
    ('closing_term', re.compile(r'^(Closing Term|Closing Date)\b', re.I)),
    ('next_term_begins', re.compile(r'^Next Term Begins\b', re.I)),
    ('include_position', re.compile(r'^To include Position\b', re.I)),
    ('term_name', re.compile(r'^(Semester / Term|Semester|Term)\b', re.I)),
    ('position', re.compile(r'^Position\b', re.I)),
)

_CONFIG_HEADERS = {
    'campus': ('campus',),
    'total_attendance': ('total attendance',),
    'closing_term': ('closing term', 'closing date'),
    'next_term_begins': ('next term begins',),
    'term_name': ('term', 'semester / term'),
    'include_position': ('to include position',),
}

_YES = re.compile(r'^(yes|true|1)$', re.I)


def class_sheet_name(class_name):
    return CLASS_SHEETS.get(class_name, f'SBA {class_name}')


def _norm(value):
    return re.sub(r'\s+', ' ', text(value).replace(':', '')).strip().lower()


def now_iso():
    return datetime.now().isoformat(timespec='seconds')


def build_sba_record(row_number, values):
    """Mapped SBA row to a record, deriving percentage and grade when blank"""
    values = dict(values)
    if text(values['percentage']):
        values['percentage'] = parse_currency(values['percentage'])
    else:
        values['percentage'] = percentage(values['score'], values['total_marks'])
    if not values['grade']:
        values['grade'] = grade_for(values['percentage'])
    return SBARecord(row_number=row_number, **values)


def sba_record_to_row(record):
    return SBA_COLUMNS.record_to_row(record.to_dict())


def fee_group(header):
    h = _norm(header)
    has_one = '1' in h or 'one' in h
    has_two = '2' in h or 'two' in h
    if 'creche' in h:
        return 'Creche'
    if 'nursery' in h and has_one and has_two:
        return 'Nursery 1 & 2'
    if 'kg' in h and has_one and has_two:
        return 'KG 1 & 2'
    if 'bs' in h and '1' in h and '3' in h:
        return 'BS 1 to 3'
    if 'bs' in h and '4' in h and '6' in h:
        return 'BS 4 to 6'
    return None


def total_score_group(header):
    h = _norm(header)
    for needle, group in (('creche', 'Creche'), ('nursery', 'Nursery 1 & 2'),
                          ('kg', 'KG 1 & 2'), ('bs', 'BS 1 to 6')):
        if needle in h:
            return group
    return None


def _groups_from_pair(header_row, value_row, classify):
    groups = {}
    for i, header in enumerate(header_row):
        group = classify(header)
        amount = parse_currency(cell(value_row, i))
        if group and amount > 0:
            groups[group] = amount
    return groups


def parse_sba_config(rows, totals=None):
    """Build SBAConfig from the SBA Config sheet.

    Three layouts are understood and applied in order: a header row with
    values beneath it, a fee table anywhere in the sheet, and 'Label: value'
    cells in column A.
    """
    config = SBAConfig()
    if not rows:
        return config

    if len(rows) >= 2 and len(rows[0]) > 1:
        headers = [_norm(h) for h in rows[0]]
        values = rows[1]
        for field, names in _CONFIG_HEADERS.items():
            index = next((headers.index(n) for n in names if n in headers), None)
            if index is None:
                continue
            raw = text(cell(values, index))
            if field == 'total_attendance':
                number = parse_currency(raw)
                if number > 0:
                    config.total_attendance = number
            elif field == 'include_position':
                config.include_position = bool(_YES.match(raw))
            elif raw:
                setattr(config, field, raw)

    for r in range(len(rows) - 1):
        groups = _groups_from_pair(rows[r], rows[r + 1], fee_group)
        if groups:
            config.fees_by_group = groups
            break

    for row in rows:
        first = text(cell(row, 0))
        if not first:
            continue
        for field, pattern in _CONFIG_LABELS:
            match = pattern.match(first)
            if not match:
                continue
            if ':' in first:
                raw = first.split(':', 1)[1]
            else:
                raw = first[match.end():]
            raw = re.sub(r'\s+', ' ', raw).strip()
            if field == 'total_attendance':
                digits = re.search(r'\d+', raw)
                if digits:
                    config.total_attendance = int(digits.group())
            elif field == 'include_position':
                if raw:
                    config.include_position = bool(_YES.match(raw))
            elif raw:
                setattr(config, field, raw)
            break

    if totals and len(totals) >= 2:
        groups = _groups_from_pair(totals[0], totals[1], total_score_group)
        if groups:
            config.total_score_by_group = groups

    return config


def _class_sheet_indices(header_row):
    headers = [_norm(h) for h in header_row]

    def first(predicate):
        return next((i for i, h in enumerate(headers) if predicate(h)), None)

    scaled = [i for i, h in enumerate(headers) if 'scaled' in h]
    return {
        'no': first(lambda h: h.startswith('no.') or h == 'no'),
        'student_name': first(lambda h: 'student name' in h or h == 'name'),
        'individual_test': first(lambda h: 'indv. test' in h or 'individual test' in h),
        'class_test': first(lambda h: 'class test' in h),
        'total_class_score': first(lambda h: 'total class score' in h),
        'scaled_class_score': scaled[0] if scaled else None,
        'exam_score': first(lambda h: 'exam' in h and 'scaled' not in h),
        'scaled_exam_score': scaled[1] if len(scaled) > 1 else None,
        'overall_total': first(lambda h: 'overall total' in h),
        'position': first(lambda h: 'position' in h),
        'subject': first(lambda h: 'subject' in h),
        'term': first(lambda h: h == 'term') if 'term' in headers else first(
            lambda h: 'term' in h and 'exam' not in h),
        'teacher_name': first(lambda h: 'teacher' in h),
    }


def parse_class_sheet(rows, class_name, subject='', term=''):
    if len(rows) <= 1:
        return None
    idx = _class_sheet_indices(rows[0])

    def txt(row, key):
        return text(cell(row, idx[key]))

    def num(row, key):
        return parse_currency(cell(row, idx[key]))

    records = []
    for i, row in enumerate(rows[1:], start=1):
        name = txt(row, 'student_name')
        if not name:
            continue
        records.append(SBAClassRecord(
            id=f'sba-{class_name}-{i}',
            student_number=int(num(row, 'no')) or i,
            student_name=name,
            individual_test_score=num(row, 'individual_test'),
            class_test_score=num(row, 'class_test'),
            total_class_score=num(row, 'total_class_score'),
            scaled_class_score=num(row, 'scaled_class_score'),
            exam_score=num(row, 'exam_score'),
            scaled_exam_score=num(row, 'scaled_exam_score'),
            overall_total=num(row, 'overall_total'),
            position=num(row, 'position'),
            subject=txt(row, 'subject') or subject,
            term=txt(row, 'term') or term,
            teacher_name=txt(row, 'teacher_name'),
        ))

    records = [
        r for r in records
        if (not subject or r.subject == subject) and (not term or r.term == term)
    ]
    teacher = records[0].teacher_name if records else ''
    return SBAClassData(class_name, subject, term, teacher, records)


def _kind(assessment_type):
    kind = assessment_type.lower()
    if 'test' in kind:
        return 'test'
    if 'quiz' in kind:
        return 'quiz'
    if 'exam' in kind:
        return 'exam'
    return 'test'


def rank_assessments(records):
    """Aggregate per-student scores for one class/subject/term and rank them"""
    by_student = {}
    for record in records:
        entry = by_student.setdefault(record.student_id, {
            'name': record.student_name, 'test': [], 'quiz': [], 'exam': [],
        })
        entry[_kind(record.assessment_type)].append(record.score)

    def average(scores, default):
        return sum(scores) / len(scores) if scores else default

    ranked = []
    for student_id, entry in by_student.items():
        test = average(entry['test'], DEFAULT_TEST_AVERAGE)
        quiz = average(entry['quiz'], DEFAULT_TEST_AVERAGE)
        exam = average(entry['exam'], DEFAULT_EXAM_AVERAGE)
        total_class = test + quiz
        scaled_class = min(CLASS_SCORE_CAP, total_class)
        scaled_exam = min(EXAM_SCORE_WEIGHT, exam / 100 * EXAM_SCORE_WEIGHT)
        ranked.append(SBAAssessmentRecord(
            id=student_id,
            student_name=entry['name'],
            individual_test_score=test,
            class_test_score=quiz,
            total_class_score=total_class,
            scaled_class_score=scaled_class,
            exam_score=exam,
            scaled_exam_score=scaled_exam,
            overall_total=scaled_class + scaled_exam,
        ))

    ranked.sort(key=lambda r: r.overall_total, reverse=True)
    for position, record in enumerate(ranked, start=1):
        record.position = position
    return ranked


class SBARepository:
    def __init__(self, client, policy=None, sleep=time.sleep):
        self.client = client
        self.policy = policy
        self.sleep = sleep

    def _rows(self, sheet, cells=None):
        return retry_read(
            lambda: self.client.fetch_rows(sheet, cells),
            default=list,
            policy=self.policy,
            description=f'fetch {sheet}',
            sleep=self.sleep,
        )

    def get_sba_records(self):
        records = []
        for row_number, values in SBA_COLUMNS.map_rows(self._rows(SBA_SHEET)):
            if not values['student_id']:
                continue
            records.append(build_sba_record(row_number, values))
        return records

    def get_student_sba_records(self, student_id, term=None):
        return [
            r for r in self.get_sba_records()
            if r.student_id == student_id and (term is None or r.term == term)
        ]

    def save_sba_record(self, record):
        """Upsert on (student id, subject, term); id and created time survive updates"""
        if not (record.student_id and record.subject and record.term):
            return WriteResult.fail(VALIDATION, 'Student ID, subject and term are required')
        if record.total_marks <= 0:
            return WriteResult.fail(VALIDATION, 'Total marks must be greater than zero')

        existing = next((r for r in self.get_sba_records() if r.key == record.key), None)
        stamp = now_iso()
        record.id = record.id or (existing.id if existing else str(uuid.uuid4()))
        record.created_at = existing.created_at if existing and existing.created_at else (record.created_at or stamp)
        record.updated_at = stamp
        record.percentage = percentage(record.score, record.total_marks)
        record.grade = grade_for(record.percentage)
        record.date = record.date or datetime.now().strftime('%d/%m/%Y')

        return upsert_row(self.client, SBA_SHEET, SBA_HEADERS, sba_record_to_row(record), SBA_KEY)

    def delete_sba_record(self, student_id, subject, term):
        return clear_by_key(self.client, SBA_SHEET, SBA_KEY, (student_id, subject, term), len(SBA_HEADERS))

    def init_sba_sheet(self):
        ensured = self.client.ensure_sheet_exists(SBA_SHEET)
        if not ensured.success:
            return ensured
        header = self.client.read_range(SBA_SHEET, row_range(1, len(SBA_HEADERS)))
        if header.success and header.data:
            return ensured
        return self.client.update_range(SBA_SHEET, row_range(1, len(SBA_HEADERS)), [SBA_HEADERS])

    def get_sba_config(self):
        rows = self._rows(SBA_CONFIG_SHEET)
        if not rows:
            logger.info('SBA Config unavailable, using defaults')
            return SBAConfig()
        totals = self._rows(SBA_CONFIG_SHEET, TOTALS_RANGE)
        return parse_sba_config(rows, totals)

    def get_sba_class_data(self, class_name, subject='', term=''):
        sheet = class_sheet_name(class_name)
        return parse_class_sheet(self._rows(sheet), class_name, subject, term)

    def get_sba_assessment(self, class_name, subject, term):
        records = [
            r for r in self.get_sba_records()
            if r.class_name == class_name and r.subject == subject and r.term == term
        ]
        if not records:
            return None
        teacher = records[0].teacher_name or 'Unknown Teacher'
        return SBAAssessment(teacher, subject, class_name, rank_assessments(records))

    def get_student_sba_assessment(self, student_id, class_name, subject, term):
        assessment = self.get_sba_assessment(class_name, subject, term)
        if assessment is None:
            return None
        return next((r for r in assessment.records if r.id == student_id), None)

    def get_available_subjects(self, class_name, term):
        return sorted({
            r.subject for r in self.get_sba_records()
            if r.class_name == class_name and r.term == term and r.subject
        })
