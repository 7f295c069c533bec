"""
Sheet names and column layouts.

Column positions are the contract between whoever writes a sheet and the
readers here; header names are matched case-insensitively when the sheet
carries a header row.
"""
from .mapper import Column, ColumnMap, parse_bool, parse_currency

STUDENTS_SHEET = 'Metadata'
CLAIMS_SHEET = 'Claims'
TEACHERS_SHEET = 'Teachers'
NON_TEACHING_SHEET = 'Non-Teaching'
ADMIN_SHEET = 'Admin'
SBA_SHEET = 'SBA'
SBA_CONFIG_SHEET = 'SBA Config'
CONFIG_SHEET = 'Config'
TEMPLATE_SHEET = 'Template'
MOBILE_USERS_SHEET = 'MobileUsers'

STUDENT_COLUMNS = ColumnMap([
    Column('student_name', 'Name', 0, aliases=('Student Name',)),
    Column('class_name', 'Grade', 1, aliases=('Class',)),
    Column('student_type', 'Student Type', 2),
    Column('gender', 'Gender', 3),
    Column('guardian_name', 'Parent Name', 4, aliases=('Guardian Name',)),
    Column('guardian_phone', 'Contact', 5, aliases=('Guardian Phone',)),
    Column('arrears', 'Arrears', 6, parse_currency, aliases=('Arreas',)),
    Column('books', 'Books Fees', 7, parse_currency),
    Column('fees', 'School Fees Amount', 8, parse_currency),
    Column('initial_amount_paid', 'Initial Amount Paid', 9, parse_currency, aliases=('Intial Amount Paid',)),
    Column('payment', 'Payment', 10, parse_currency),
    Column('books_fee_payment', 'Books Fee Payment', 11, parse_currency, aliases=('Books Fees Payment',)),
    Column('balance', 'Total Balance', 12, parse_currency),
    Column('number', 'No.', 13),
])

CLAIM_HEADERS = [
    'Invoice Number', 'Guardian Name', 'Guardian Phone', 'Relationship',
    'Student Name', 'Class', 'Total Fees Balance', 'Due Date', 'Timestamp',
    'Paid', 'Payment Date', 'Payment Reference',
]

CLAIM_COLUMNS = ColumnMap([
    Column('invoice_number', 'Invoice Number', 0),
    Column('guardian_name', 'Guardian Name', 1),
    Column('guardian_phone', 'Guardian Phone', 2),
    Column('relationship', 'Relationship', 3),
    Column('student_name', 'Student Name', 4),
    Column('class_name', 'Class', 5),
    Column('total_fees_balance', 'Total Fees Balance', 6, parse_currency),
    Column('due_date', 'Due Date', 7),
    Column('timestamp', 'Timestamp', 8),
    Column('paid', 'Paid', 9, parse_bool),
    Column('payment_date', 'Payment Date', 10),
    Column('payment_reference', 'Payment Reference', 11),
], CLAIM_HEADERS)

# Claims columns touched when a payment is recorded (0-based)
CLAIM_PAID_INDEX = 9
CLAIM_PAYMENT_DATE_INDEX = 10
CLAIM_PAYMENT_REFERENCE_INDEX = 11

TEACHER_HEADERS = [
    'Name', 'Class', 'Role', 'Status', 'Username', 'Password', 'Contact',
    'Location', 'Employment Date', 'Date Stopped', 'Admin Privileges',
]

TEACHER_COLUMNS = ColumnMap([
    Column('name', 'Name', 0),
    Column('class_name', 'Class', 1),
    Column('role', 'Role', 2),
    Column('status', 'Status', 3),
    Column('username', 'Username', 4),
    Column('password', 'Password', 5),
    Column('contact', 'Contact', 6),
    Column('location', 'Location', 7),
    Column('employment_date', 'Employment Date', 8),
    Column('date_stopped', 'Date Stopped', 9),
    Column('admin_privileges', 'Admin Privileges', 10),
], TEACHER_HEADERS)

NON_TEACHER_HEADERS = [
    'Name', 'Department', 'Role', 'Status', 'Username', 'Password', 'Contact',
    'Location', 'Date Created', 'Date Updated',
]

NON_TEACHER_COLUMNS = ColumnMap([
    Column('name', 'Name', 0),
    Column('department', 'Department', 1),
    Column('role', 'Role', 2),
    Column('status', 'Status', 3),
    Column('username', 'Username', 4),
    Column('password', 'Password', 5),
    Column('contact', 'Contact', 6),
    Column('location', 'Location', 7),
    Column('date_created', 'Date Created', 8),
    Column('date_updated', 'Date Updated', 9),
], NON_TEACHER_HEADERS)

ADMIN_COLUMNS = ColumnMap([
    Column('username', 'Username', 0),
    Column('password', 'Password', 1),
    Column('role', 'Role', 2),
], ['Username', 'Password', 'Role'])

MOBILE_USER_HEADERS = [
    'ID', 'Name', 'DateOfBirth', 'Address', 'Residence', 'ChildName', 'ChildClass',
    'RegistrationDate', 'Contact', 'Email', 'Username', 'Password', 'ProfilePicture',
    'ChildPicture', 'Role', 'IsActive', 'CreatedAt', 'UpdatedAt',
]

MOBILE_USER_COLUMNS = ColumnMap([
    Column('id', 'ID', 0),
    Column('name', 'Name', 1),
    Column('date_of_birth', 'DateOfBirth', 2, aliases=('Date of Birth',)),
    Column('address', 'Address', 3),
    Column('residence', 'Residence', 4),
    Column('child_name', 'ChildName', 5, aliases=('Child Name',)),
    Column('child_class', 'ChildClass', 6, aliases=('Child Class',)),
    Column('registration_date', 'RegistrationDate', 7, aliases=('Registration Date',)),
    Column('contact', 'Contact', 8),
    Column('email', 'Email', 9),
    Column('username', 'Username', 10),
    Column('password', 'Password', 11),
    Column('profile_picture', 'ProfilePicture', 12),
    Column('child_picture', 'ChildPicture', 13),
    Column('role', 'Role', 14),
    Column('is_active', 'IsActive', 15, parse_bool),
    Column('created_at', 'CreatedAt', 16),
    Column('updated_at', 'UpdatedAt', 17),
], MOBILE_USER_HEADERS)

SBA_HEADERS = [
    'ID', 'Student ID', 'Student Name', 'Class', 'Subject', 'Term',
    'Academic Year', 'Assessment Type', 'Score', 'Total Marks', 'Percentage',
    'Grade', 'Remarks', 'Date', 'Teacher ID', 'Teacher Name', 'Created At',
    'Updated At',
]

SBA_COLUMNS = ColumnMap([
    Column('id', 'ID', 0),
    Column('student_id', 'Student ID', 1),
    Column('student_name', 'Student Name', 2),
    Column('class_name', 'Class', 3),
    Column('subject', 'Subject', 4),
    Column('term', 'Term', 5),
    Column('academic_year', 'Academic Year', 6),
    Column('assessment_type', 'Assessment Type', 7),
    Column('score', 'Score', 8, parse_currency),
    Column('total_marks', 'Total Marks', 9, parse_currency),
    Column('percentage', 'Percentage', 10),
    Column('grade', 'Grade', 11),
    Column('remarks', 'Remarks', 12),
    Column('date', 'Date', 13),
    Column('teacher_id', 'Teacher ID', 14),
    Column('teacher_name', 'Teacher Name', 15),
    Column('created_at', 'Created At', 16),
    Column('updated_at', 'Updated At', 17),
], SBA_HEADERS)

# Business-key columns (0-based) used by the upsert resolver
CLAIM_KEY = (0,)
STAFF_KEY = (4,)
SBA_KEY = (1, 4, 5)
MOBILE_USER_KEY = (0,)

CONFIG_HEADERS = [
    'School Name', 'Address', 'Momo number', 'Due Date', 'Invoice number',
    'Sender ID', 'SMS Enabled', 'Fee Reminders Enabled',
    'Payment Notifications Enabled', 'Admission Notifications Enabled',
]

CONFIG_COLUMNS = ColumnMap([
    Column('school_name', 'School Name', 0),
    Column('address', 'Address', 1),
    Column('momo_number', 'Momo number', 2),
    Column('due_date', 'Due Date', 3),
    Column('invoice_prefix', 'Invoice number', 4, aliases=('Invoice Prefix',)),
    Column('sender_id', 'Sender ID', 5),
    Column('sms_enabled', 'SMS Enabled', 6),
    Column('fee_reminders_enabled', 'Fee Reminders Enabled', 7),
    Column('payment_notifications_enabled', 'Payment Notifications Enabled', 8),
    Column('admission_notifications_enabled', 'Admission Notifications Enabled', 9),
], CONFIG_HEADERS)

NOTIFICATION_FIELDS = (
    'sms_enabled', 'fee_reminders_enabled',
    'payment_notifications_enabled', 'admission_notifications_enabled',
)

TEMPLATE_COLUMNS = ColumnMap([
    Column('fee_reminder', 'Fee Reminder Template', 0),
    Column('admin_activation', 'Admin Activation Template', 1),
    Column('otp', 'OTP Template', 2),
    Column('activation', 'Activation Template', 3),
    Column('payment_notification', 'Payment Notification Template', 4),
    Column('admission_notification', 'Admission Notification Template', 5),
    Column('sender_id', 'Sender ID', 6),
])
