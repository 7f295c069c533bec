"""
SMS and OTP delivery through the Frog (Wigal) gateway
"""
import re
import uuid

import requests

from .app_logger import get_logger
from .errors import TRANSPORT, VALIDATION, WriteResult
from .mapper import text
from .sms_templates import render, render_otp_template

logger = get_logger(__name__)

OTP_SUCCESS = 'SUCCESS'
SEND_ACCEPTED = 'ACCEPTD'


def normalize_phone(phone):
    """Ghana numbers to 233XXXXXXXXX; None when the number is unusable"""
    digits = re.sub(r'[\s\-().]', '', text(phone))
    if digits.startswith('+'):
        digits = digits[1:]
    if not digits.isdigit():
        return None
    if len(digits) == 12 and digits.startswith('233'):
        return digits
    if len(digits) == 10 and digits.startswith('0'):
        return '233' + digits[1:]
    if len(digits) == 9:
        return '233' + digits
    return None


def money(amount):
    return f'{amount:,.2f}'


class SmsGateway:
    def __init__(self, api_key, username, base_url='https://frogapi.wigal.com.gh/api/v3',
                 sender_id='CHARIOT EDU', timeout=30, session=None):
        self.api_key = re.sub(r'^["\']|["\']$', '', api_key or '').replace('\\', '')
        self.username = username or ''
        self.base_url = base_url.rstrip('/')
        self.sender_id = sender_id
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, config, session=None):
        return cls(
            config.get('FROG_API_KEY'),
            config.get('FROG_USERNAME'),
            base_url=config.get('FROG_API_BASE_URL', 'https://frogapi.wigal.com.gh/api/v3'),
            sender_id=config.get('FROG_SENDER_ID', 'CHARIOT EDU'),
            timeout=config.get('SHEETS_TIMEOUT', 30),
            session=session,
        )

    @property
    def configured(self):
        return bool(self.api_key and self.username)

    def _post(self, path, body, success_status):
        if not self.configured:
            logger.error('SMS gateway credentials are not configured')
            return WriteResult.fail(TRANSPORT, 'API credentials not configured.')
        try:
            response = self.session.post(
                f'{self.base_url}{path}',
                json=body,
                headers={'API-KEY': self.api_key, 'USERNAME': self.username},
                timeout=self.timeout,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error('SMS gateway call %s failed: %s', path, exc)
            return WriteResult.fail(TRANSPORT, 'Could not reach the SMS gateway.')

        if response.ok and data.get('status') == success_status:
            return WriteResult.ok(data.get('message') or 'OK', data.get('data'))
        logger.warning('SMS gateway rejected %s: %s', path, data)
        return WriteResult.fail(TRANSPORT, data.get('message') or f'Gateway returned {data.get("status")}')

    def generate_otp(self, phone, template, sender_id=None, expiry=5, length=6):
        number = normalize_phone(phone)
        if not number:
            return WriteResult.fail(VALIDATION, f'Invalid phone number: {phone}')
        sender = sender_id or self.sender_id
        return self._post('/sms/otp/generate', {
            'number': number,
            'expiry': expiry,
            'length': length,
            'messagetemplate': render_otp_template(template, senderId=sender),
            'type': 'NUMERIC',
            'senderid': sender,
        }, OTP_SUCCESS)

    def verify_otp(self, phone, code):
        number = normalize_phone(phone)
        if not number:
            return WriteResult.fail(VALIDATION, f'Invalid phone number: {phone}')
        return self._post('/sms/otp/verify', {'otpcode': text(code), 'number': number}, OTP_SUCCESS)

    def generate_admin_activation_code(self, phone, template, student_name, class_name,
                                       total_amount, guardian_phone='', sender_id=None):
        number = normalize_phone(phone)
        if not number:
            return WriteResult.fail(VALIDATION, f'Invalid phone number: {phone}')
        sender = sender_id or self.sender_id
        message = render_otp_template(
            template,
            guardianPhone=guardian_phone,
            studentName=student_name,
            className=class_name,
            totalAmount=money(total_amount),
            senderId=sender,
        )
        return self._post('/sms/otp/generate', {
            'number': number,
            'expiry': 15,
            'length': 8,
            'messagetemplate': message,
            'type': 'ALPHANUMERIC',
            'senderid': sender,
        }, OTP_SUCCESS)

    def send_sms(self, phone, message, msgid=None, sender_id=None):
        number = normalize_phone(phone)
        if not number:
            return WriteResult.fail(VALIDATION, f'Invalid phone number: {phone}')
        result = self._post('/sms/send', {
            'senderid': sender_id or self.sender_id,
            'destinations': [{
                'destination': number,
                'message': message,
                'msgid': msgid or f'msg-{uuid.uuid4().hex[:8]}',
                'smstype': 'text',
            }],
        }, SEND_ACCEPTED)
        if result.success:
            logger.info('SMS accepted for %s', number)
        return result


def send_fee_reminder(gateway, student, config, templates):
    """Send one fee reminder, honouring the school's notification switches"""
    flags = config.notifications
    if not (flags.sms_enabled and flags.fee_reminders_enabled):
        return WriteResult.fail(VALIDATION, 'Fee reminders are disabled')
    if not student.guardian_phone:
        return WriteResult.fail(VALIDATION, f'No guardian phone for {student.student_name}')
    if student.balance <= 0:
        return WriteResult.fail(VALIDATION, f'{student.student_name} has no outstanding balance')

    message = render(
        templates.fee_reminder,
        guardianName=student.guardian_name or 'Parent/Guardian',
        schoolName=config.school_name,
        studentName=student.student_name,
        balance=money(student.balance),
        dueDate=config.due_date,
    )
    msgid = f'reminder-{student.id}-{uuid.uuid4().hex[:4]}'
    sender_id = templates.sender_id or config.sender_id
    return gateway.send_sms(student.guardian_phone, message, msgid=msgid, sender_id=sender_id)


def send_payment_notification(gateway, claim, amount, balance, config, templates):
    """Payment receipt SMS; callers treat a failure as non-fatal to the payment"""
    flags = config.notifications
    if not (flags.sms_enabled and flags.payment_notifications_enabled):
        return WriteResult.fail(VALIDATION, 'Payment notifications are disabled')
    message = render(
        templates.payment_notification,
        guardianName=claim.guardian_name or 'Parent/Guardian',
        amount=money(amount),
        studentName=claim.student_name,
        balance=money(balance),
        schoolName=config.school_name,
    )
    msgid = f'payment-{claim.invoice_number}-{uuid.uuid4().hex[:4]}'
    sender_id = templates.sender_id or config.sender_id
    return gateway.send_sms(claim.guardian_phone, message, msgid=msgid, sender_id=sender_id)
