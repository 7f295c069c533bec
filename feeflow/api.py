"""
JSON API over the sheet-backed repositories
"""
from flask import Blueprint, current_app, jsonify, request

from .app_logger import get_logger
from .errors import CONFLICT, NOT_FOUND, TRANSPORT, VALIDATION, SheetAccessError, WriteResult
from .forms import (
    ClaimForm, MobileUserForm, NonTeacherForm, NotificationSettingsForm, PaymentStatusForm,
    SBARecordForm, TeacherForm, VerificationCodeForm, validate_payload,
)
from .models import Claim, MobileUser, NonTeacherUser, NotificationSettings, SBARecord, TeacherUser
from .sms import send_fee_reminder, send_payment_notification
from .staff import NON_TEACHER, TEACHER
from .verification import DEFAULT_TTL

logger = get_logger(__name__)

api_bp = Blueprint('api', __name__)

STATUS_BY_KIND = {
    VALIDATION: 400,
    NOT_FOUND: 404,
    CONFLICT: 409,
    TRANSPORT: 502,
}

STAFF_ROUTES = {
    'teachers': (TEACHER, TeacherForm, TeacherUser),
    'non-teaching': (NON_TEACHER, NonTeacherForm, NonTeacherUser),
}


def services():
    return current_app.extensions['feeflow']


def write_response(result):
    if result.success:
        created = isinstance(result.data, dict) and result.data.get('action') == 'created'
        return jsonify(result.to_dict()), 201 if created else 200
    return jsonify(result.to_dict()), STATUS_BY_KIND.get(result.kind, 500)


def validation_error(errors):
    return jsonify({'success': False, 'error': VALIDATION, 'message': 'Invalid request', 'errors': errors}), 400


def json_body():
    return request.get_json(silent=True) or {}


@api_bp.errorhandler(SheetAccessError)
def handle_sheet_access_error(exc):
    logger.error('Sheet access failed: %s', exc)
    return jsonify({'success': False, 'error': TRANSPORT, 'message': str(exc)}), 502


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------
@api_bp.route('/students')
def list_students():
    class_name = request.args.get('class')
    repo = services().students
    students = repo.get_students_by_class(class_name) if class_name else repo.get_all_students()
    return jsonify([s.to_dict() for s in students])


@api_bp.route('/students/count')
def count_students():
    return jsonify({'count': services().students.get_total_students_count()})


@api_bp.route('/students/<student_id>')
def get_student(student_id):
    student = services().students.get_student_by_id(student_id)
    if student is None:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': 'Student not found'}), 404
    return jsonify(student.to_dict())


@api_bp.route('/classes')
def list_classes():
    return jsonify(services().students.get_classes())


@api_bp.route('/students/<student_id>/reminder', methods=['POST'])
def send_reminder(student_id):
    svc = services()
    student = svc.students.get_student_by_id(student_id)
    if student is None:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': 'Student not found'}), 404
    result = send_fee_reminder(svc.gateway, student, svc.school_config.get_school_config(),
                               svc.templates.get_templates())
    return write_response(result)


# ---------------------------------------------------------------------------
# Claims and invoices
# ---------------------------------------------------------------------------
@api_bp.route('/claims')
def list_claims():
    return jsonify([c.to_dict() for c in services().claims.get_claims()])


@api_bp.route('/claims', methods=['POST'])
def save_claim():
    data, errors = validate_payload(ClaimForm, json_body())
    if errors:
        return validation_error(errors)
    data['total_fees_balance'] = data['total_fees_balance'] or 0.0
    claim = Claim(**{k: ('' if v is None else v) for k, v in data.items()})
    return write_response(services().claims.save_claim(claim))


@api_bp.route('/claims/<invoice_number>', methods=['DELETE'])
def delete_claim(invoice_number):
    return write_response(services().claims.delete_claim(invoice_number))


@api_bp.route('/claims/delete', methods=['POST'])
def delete_claims():
    numbers = json_body().get('invoice_numbers')
    if not isinstance(numbers, list) or not all(isinstance(n, str) and n for n in numbers):
        return validation_error({'invoice_numbers': ['A list of invoice numbers is required.']})
    return write_response(services().claims.delete_claims(numbers))


@api_bp.route('/invoices')
def list_invoices():
    return jsonify([i.to_dict() for i in services().claims.get_invoices()])


@api_bp.route('/invoices/next-number')
def next_invoice_number():
    svc = services()
    prefix = request.args.get('prefix') or svc.school_config.get_school_config().invoice_prefix
    return jsonify({'invoice_number': svc.claims.next_invoice_number(prefix)})


@api_bp.route('/invoices/<invoice_number>', methods=['PATCH'])
def update_invoice(invoice_number):
    payload = json_body()
    data, errors = validate_payload(ClaimForm, payload, partial=True)
    if errors:
        return validation_error(errors)
    if not data:
        return validation_error({'fields': ['Nothing to update.']})
    return write_response(services().claims.update_invoice(invoice_number, **data))


@api_bp.route('/invoices/<invoice_number>/payment', methods=['POST'])
def record_payment(invoice_number):
    payload = dict(json_body())
    payload.setdefault('paid', True)
    data, errors = validate_payload(PaymentStatusForm, payload)
    if errors:
        return validation_error(errors)

    svc = services()
    result = svc.claims.update_invoice_payment_status(
        invoice_number,
        paid=data['paid'],
        payment_date=data['payment_date'] or None,
        payment_reference=data['payment_reference'] or '',
    )
    if result.success and data['paid'] and payload.get('notify'):
        claim = svc.claims.get_claim(invoice_number)
        if claim is not None:
            sms = send_payment_notification(
                svc.gateway, claim, claim.total_fees_balance, 0,
                svc.school_config.get_school_config(), svc.templates.get_templates(),
            )
            # A failed receipt SMS never fails the payment
            if not sms.success:
                logger.warning('Payment SMS for %s not sent: %s', invoice_number, sms.message)
    return write_response(result)


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------
@api_bp.route('/staff/<group>')
def list_staff(group):
    repo = services().staff
    if group == 'admins':
        users = repo.get_admin_users()
    elif group == 'teachers':
        users = repo.get_teacher_users()
    elif group == 'non-teaching':
        users = repo.get_non_teacher_users()
    else:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': f'Unknown staff group {group}'}), 404
    return jsonify([u.public_dict() for u in users])


@api_bp.route('/staff/<group>', methods=['POST'])
def add_staff(group):
    if group not in STAFF_ROUTES:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': f'Unknown staff group {group}'}), 404
    kind, form_class, model = STAFF_ROUTES[group]
    data, errors = validate_payload(form_class, json_body())
    if errors:
        return validation_error(errors)
    user = model(**{k: v for k, v in data.items() if v not in (None, '')})
    return write_response(services().staff.add_staff(kind, user))


@api_bp.route('/staff/<group>/<username>', methods=['PATCH'])
def update_staff(group, username):
    if group not in STAFF_ROUTES:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': f'Unknown staff group {group}'}), 404
    kind, form_class, _ = STAFF_ROUTES[group]
    data, errors = validate_payload(form_class, json_body(), partial=True)
    if errors:
        return validation_error(errors)
    if not data:
        return validation_error({'fields': ['Nothing to update.']})
    return write_response(services().staff.update_staff_by_username(kind, username, **data))


@api_bp.route('/staff/<group>/<username>', methods=['DELETE'])
def delete_staff(group, username):
    if group not in STAFF_ROUTES:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': f'Unknown staff group {group}'}), 404
    kind = STAFF_ROUTES[group][0]
    return write_response(services().staff.delete_staff(kind, username))


# ---------------------------------------------------------------------------
# Mobile app accounts
# ---------------------------------------------------------------------------
@api_bp.route('/mobile-users')
def list_mobile_users():
    return jsonify([u.public_dict() for u in services().mobile_users.get_mobile_users()])


@api_bp.route('/mobile-users', methods=['POST'])
def register_mobile_user():
    data, errors = validate_payload(MobileUserForm, json_body())
    if errors:
        return validation_error(errors)
    user = MobileUser(**{k: v for k, v in data.items() if v not in (None, '')})
    return write_response(services().mobile_users.register_mobile_user(user))


# ---------------------------------------------------------------------------
# SBA
# ---------------------------------------------------------------------------
@api_bp.route('/sba/records')
def list_sba_records():
    repo = services().sba
    student_id = request.args.get('student_id')
    if student_id:
        records = repo.get_student_sba_records(student_id, request.args.get('term'))
    else:
        records = repo.get_sba_records()
    return jsonify([r.to_dict() for r in records])


@api_bp.route('/sba/records', methods=['POST'])
def save_sba_record():
    data, errors = validate_payload(SBARecordForm, json_body())
    if errors:
        return validation_error(errors)
    data['total_marks'] = data['total_marks'] or 100.0
    record = SBARecord(id='', **{k: ('' if v is None else v) for k, v in data.items()})
    return write_response(services().sba.save_sba_record(record))


@api_bp.route('/sba/records', methods=['DELETE'])
def delete_sba_record():
    payload = json_body()
    missing = [k for k in ('student_id', 'subject', 'term') if not payload.get(k)]
    if missing:
        return validation_error({k: ['This field is required.'] for k in missing})
    return write_response(services().sba.delete_sba_record(
        payload['student_id'], payload['subject'], payload['term']))


@api_bp.route('/sba/config')
def sba_config():
    return jsonify(services().sba.get_sba_config().to_dict())


@api_bp.route('/sba/class/<class_name>')
def sba_class_data(class_name):
    data = services().sba.get_sba_class_data(
        class_name, request.args.get('subject', ''), request.args.get('term', ''))
    if data is None:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': f'No SBA sheet data for {class_name}'}), 404
    return jsonify(data.to_dict())


@api_bp.route('/sba/assessment')
def sba_assessment():
    args = request.args
    missing = [k for k in ('class', 'subject', 'term') if not args.get(k)]
    if missing:
        return validation_error({k: ['This field is required.'] for k in missing})
    assessment = services().sba.get_sba_assessment(args['class'], args['subject'], args['term'])
    if assessment is None:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': 'No assessments recorded'}), 404
    return jsonify(assessment.to_dict())


@api_bp.route('/sba/subjects')
def sba_subjects():
    return jsonify(services().sba.get_available_subjects(
        request.args.get('class', ''), request.args.get('term', '')))


# ---------------------------------------------------------------------------
# School config and SMS templates
# ---------------------------------------------------------------------------
@api_bp.route('/config')
def school_config():
    return jsonify(services().school_config.get_school_config().to_dict())


@api_bp.route('/config/notifications', methods=['PUT'])
def save_notification_settings():
    data, errors = validate_payload(NotificationSettingsForm, json_body())
    if errors:
        return validation_error(errors)
    result = services().school_config.save_notification_settings(NotificationSettings(**data))
    return write_response(result)


@api_bp.route('/templates')
def sms_templates():
    svc = services()
    templates = svc.templates.get_templates().to_dict()
    templates['sender_id'] = svc.school_config.get_school_config().sender_id
    return jsonify(templates)


@api_bp.route('/templates/cache', methods=['DELETE'])
def clear_template_cache():
    services().templates.clear_cache()
    return jsonify({'success': True, 'message': 'SMS template cache cleared'})


# ---------------------------------------------------------------------------
# Verification codes
# ---------------------------------------------------------------------------
@api_bp.route('/verification-codes', methods=['POST'])
def issue_verification_code():
    payload = json_body()
    invoice_id = payload.get('invoice_id')
    if not invoice_id:
        return validation_error({'invoice_id': ['This field is required.']})
    svc = services()
    claim = svc.claims.get_claim(invoice_id)
    if claim is None:
        return jsonify({'success': False, 'error': NOT_FOUND, 'message': f'Invoice {invoice_id} not found'}), 404

    entry = svc.verification_codes.store(invoice_id, claim.total_fees_balance, claim.student_name)
    sender_id = svc.school_config.get_school_config().sender_id
    message = (f'Your {sender_id} payment code for {claim.student_name} is {entry.code}. '
               f'It expires in {DEFAULT_TTL // 60} minutes.')
    sent = svc.gateway.send_sms(claim.guardian_phone, message, sender_id=sender_id)
    if not sent.success:
        return write_response(sent)
    return jsonify({'success': True, 'message': 'Verification code sent',
                    'data': {'invoice_id': invoice_id, 'expires_at': entry.expires_at}})


@api_bp.route('/verification-codes/verify', methods=['POST'])
def verify_code():
    data, errors = validate_payload(VerificationCodeForm, json_body())
    if errors:
        return validation_error(errors)
    if services().verification_codes.verify(data['invoice_id'], data['code']):
        return jsonify({'success': True, 'message': 'Code verified'})
    return write_response(WriteResult.fail(VALIDATION, 'Invalid or expired code'))
