"""
WTForms validation for JSON write payloads
"""
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, FloatField, Form, StringField
from wtforms.validators import AnyOf, DataRequired, InputRequired, Length, NumberRange, Optional


def to_multidict(payload):
    """JSON object to form data; booleans become 'true'/'false'"""
    items = []
    for key, value in (payload or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        items.append((key, str(value)))
    return MultiDict(items)


def validate_payload(form_class, payload, partial=False):
    """Return (data, errors). With partial=True only keys present in payload count;
    a null value counts as absent, so it never overwrites a stored cell."""
    payload = payload or {}
    form = form_class(formdata=to_multidict(payload))
    form.validate()
    if not partial:
        return form.data, form.errors
    present = {k for k, v in payload.items() if v is not None}
    data = {k: v for k, v in form.data.items() if k in present}
    errors = {k: v for k, v in form.errors.items() if k in present}
    return data, errors


class ClaimForm(Form):
    invoice_number = StringField('Invoice Number', [DataRequired(), Length(max=64)])
    guardian_name = StringField('Guardian Name', [Optional(), Length(max=120)])
    guardian_phone = StringField('Guardian Phone', [Optional(), Length(max=20)])
    relationship = StringField('Relationship', [Optional()])
    student_name = StringField('Student Name', [DataRequired()])
    class_name = StringField('Class', [DataRequired()])
    total_fees_balance = FloatField('Total Fees Balance', [Optional(), NumberRange(min=0)])
    due_date = StringField('Due Date', [Optional()])
    timestamp = StringField('Timestamp', [Optional()])
    paid = BooleanField('Paid')
    payment_date = StringField('Payment Date', [Optional()])
    payment_reference = StringField('Payment Reference', [Optional()])


class PaymentStatusForm(Form):
    paid = BooleanField('Paid')
    payment_date = StringField('Payment Date', [Optional()])
    payment_reference = StringField('Payment Reference', [Optional(), Length(max=64)])


class TeacherForm(Form):
    username = StringField('Username', [DataRequired(), Length(min=3, max=50)])
    name = StringField('Name', [DataRequired()])
    class_name = StringField('Class', [Optional()])
    role = StringField('Role', [Optional()])
    status = StringField('Status', [Optional(), AnyOf(['active', 'inactive'])])
    password = StringField('Password', [Optional(), Length(min=4)])
    contact = StringField('Contact', [Optional()])
    location = StringField('Location', [Optional()])
    employment_date = StringField('Employment Date', [Optional()])
    date_stopped = StringField('Date Stopped', [Optional()])
    admin_privileges = StringField('Admin Privileges', [Optional(), AnyOf(['Yes', 'No'])])


class NonTeacherForm(Form):
    username = StringField('Username', [DataRequired(), Length(min=3, max=50)])
    name = StringField('Name', [DataRequired()])
    department = StringField('Department', [Optional()])
    role = StringField('Role', [Optional()])
    status = StringField('Status', [Optional(), AnyOf(['active', 'inactive'])])
    password = StringField('Password', [Optional(), Length(min=4)])
    contact = StringField('Contact', [Optional()])
    location = StringField('Location', [Optional()])
    date_created = StringField('Date Created', [Optional()])
    date_updated = StringField('Date Updated', [Optional()])


class MobileUserForm(Form):
    name = StringField('Name', [DataRequired()])
    contact = StringField('Contact', [DataRequired(), Length(max=20)])
    username = StringField('Username', [DataRequired(), Length(min=3, max=50)])
    password = StringField('Password', [DataRequired(), Length(min=4)])
    email = StringField('Email', [Optional(), Length(max=120)])
    date_of_birth = StringField('Date of Birth', [Optional()])
    address = StringField('Address', [Optional()])
    residence = StringField('Residence', [Optional()])
    child_name = StringField('Child Name', [Optional()])
    child_class = StringField('Child Class', [Optional()])
    registration_date = StringField('Registration Date', [Optional()])
    profile_picture = StringField('Profile Picture', [Optional()])
    child_picture = StringField('Child Picture', [Optional()])
    role = StringField('Role', [Optional(), AnyOf(['parent', 'guardian'])])


class SBARecordForm(Form):
    student_id = StringField('Student ID', [DataRequired()])
    student_name = StringField('Student Name', [Optional()])
    class_name = StringField('Class', [Optional()])
    subject = StringField('Subject', [DataRequired()])
    term = StringField('Term', [DataRequired()])
    academic_year = StringField('Academic Year', [Optional()])
    assessment_type = StringField('Assessment Type', [Optional()])
    score = FloatField('Score', [InputRequired(), NumberRange(min=0)])
    total_marks = FloatField('Total Marks', [Optional(), NumberRange(min=1)], default=100)
    remarks = StringField('Remarks', [Optional()])
    date = StringField('Date', [Optional()])
    teacher_id = StringField('Teacher ID', [Optional()])
    teacher_name = StringField('Teacher Name', [Optional()])


class NotificationSettingsForm(Form):
    sms_enabled = BooleanField('SMS Enabled')
    fee_reminders_enabled = BooleanField('Fee Reminders Enabled')
    payment_notifications_enabled = BooleanField('Payment Notifications Enabled')
    admission_notifications_enabled = BooleanField('Admission Notifications Enabled')


class VerificationCodeForm(Form):
    invoice_id = StringField('Invoice', [DataRequired()])
    code = StringField('Code', [DataRequired(), Length(min=4, max=10)])
