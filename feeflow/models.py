"""
Typed records produced by the row mappers
"""
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional


class Record:
    def to_dict(self):
        return asdict(self)


@dataclass
class Student(Record):
    id: str
    student_name: str
    class_name: str
    gender: str = 'Other'
    student_type: str = ''
    guardian_name: str = ''
    guardian_phone: str = ''
    fees: float = 0.0
    books: float = 0.0
    arrears: float = 0.0
    school_fees_paid: float = 0.0
    books_fee_paid: float = 0.0
    balance: float = 0.0
    amount_paid: float = 0.0
    row_number: int = 0


@dataclass
class Claim(Record):
    invoice_number: str
    guardian_name: str = ''
    guardian_phone: str = ''
    relationship: str = ''
    student_name: str = ''
    class_name: str = ''
    total_fees_balance: float = 0.0
    due_date: str = ''
    timestamp: str = ''
    paid: bool = False
    payment_date: str = ''
    payment_reference: str = ''


@dataclass
class Invoice(Record):
    """Claims row presented as an invoice"""
    id: str
    amount: float
    status: str
    created_at: str
    updated_at: str
    description: str
    reference: str
    guardian_name: str
    guardian_phone: str
    student_name: str
    student_class: str
    due_date: str


class StaffRecord(Record):
    def public_dict(self):
        data = self.to_dict()
        data.pop('password', None)
        return data


@dataclass
class TeacherUser(StaffRecord):
    username: str
    name: str = ''
    class_name: str = ''
    role: str = 'Teacher'
    status: str = 'active'
    password: str = ''
    contact: str = ''
    location: str = ''
    employment_date: str = ''
    date_stopped: str = ''
    admin_privileges: str = 'No'


@dataclass
class NonTeacherUser(StaffRecord):
    username: str
    name: str = ''
    department: str = ''
    role: str = ''
    status: str = 'active'
    password: str = ''
    contact: str = ''
    location: str = ''
    date_created: str = ''
    date_updated: str = ''


@dataclass
class AdminUser(StaffRecord):
    username: str
    password: str = ''
    role: str = 'Admin'


@dataclass
class MobileUser(StaffRecord):
    """Parent or guardian account registered from the mobile app"""
    username: str
    name: str = ''
    contact: str = ''
    password: str = ''
    id: str = ''
    date_of_birth: str = ''
    address: str = ''
    residence: str = ''
    child_name: str = ''
    child_class: str = ''
    registration_date: str = ''
    email: str = ''
    profile_picture: str = ''
    child_picture: str = ''
    role: str = 'parent'
    is_active: bool = True
    created_at: str = ''
    updated_at: str = ''


@dataclass
class SBARecord(Record):
    id: str
    student_id: str
    student_name: str = ''
    class_name: str = ''
    subject: str = ''
    term: str = ''
    academic_year: str = ''
    assessment_type: str = ''
    score: float = 0.0
    total_marks: float = 100.0
    percentage: float = 0.0
    grade: str = ''
    remarks: str = ''
    date: str = ''
    teacher_id: str = ''
    teacher_name: str = ''
    created_at: str = ''
    updated_at: str = ''
    row_number: int = 0

    @property
    def key(self):
        return (self.student_id, self.subject, self.term)


@dataclass
class SBAAssessmentRecord(Record):
    id: str
    student_name: str
    individual_test_score: float
    class_test_score: float
    total_class_score: float
    scaled_class_score: float
    exam_score: float
    scaled_exam_score: float
    overall_total: float
    position: int = 0


@dataclass
class SBAAssessment(Record):
    teacher_name: str
    subject: str
    class_name: str
    records: List[SBAAssessmentRecord] = field(default_factory=list)


@dataclass
class SBAClassRecord(Record):
    id: str
    student_number: int
    student_name: str
    individual_test_score: float = 0.0
    class_test_score: float = 0.0
    total_class_score: float = 0.0
    scaled_class_score: float = 0.0
    exam_score: float = 0.0
    scaled_exam_score: float = 0.0
    overall_total: float = 0.0
    position: float = 0.0
    subject: str = ''
    term: str = ''
    teacher_name: str = ''


@dataclass
class SBAClassData(Record):
    class_name: str
    subject: str
    term: str
    teacher_name: str
    records: List[SBAClassRecord] = field(default_factory=list)


@dataclass
class SBAConfig(Record):
    campus: str = 'Duase'
    total_attendance: float = 65
    closing_term: str = '17-Apr-25'
    next_term_begins: str = '12-May-25'
    term_name: str = 'Second'
    position: str = '4th'
    include_position: bool = True
    fees_by_group: Dict[str, float] = field(default_factory=dict)
    total_score_by_group: Dict[str, float] = field(default_factory=dict)


@dataclass
class NotificationSettings(Record):
    sms_enabled: bool = True
    fee_reminders_enabled: bool = True
    payment_notifications_enabled: bool = True
    admission_notifications_enabled: bool = False


@dataclass
class SchoolConfig(Record):
    school_name: str = 'Chariot Educational Complex'
    address: str = 'P.O.Box TA Old-Tafo'
    momo_number: str = '23356282694 - David Amankwaah'
    due_date: str = '30/10/2025'
    invoice_prefix: str = 'CEC-INV'
    sender_id: str = 'CHARIOT EDU'
    logo_url: Optional[str] = None
    notifications: NotificationSettings = field(default_factory=NotificationSettings)


@dataclass
class SmsTemplates(Record):
    fee_reminder: str
    admin_activation: str
    otp: str
    activation: str
    payment_notification: str
    admission_notification: str
    sender_id: str = ''


@dataclass
class VerificationCode(Record):
    code: str
    invoice_id: str
    amount: float
    student_name: str
    expires_at: float
