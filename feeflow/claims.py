"""
Claims sheet: phone claims that become invoices, and their payment status
"""
import re
import time
from datetime import datetime

from .app_logger import get_logger
from .errors import VALIDATION, WriteResult
from .mapper import format_bool, parse_currency, text
from .models import Claim, Invoice
from .retry import retry_call, retry_read
from .schemas import (
    CLAIM_COLUMNS, CLAIM_HEADERS, CLAIM_KEY, CLAIM_PAID_INDEX,
    CLAIM_PAYMENT_DATE_INDEX, CLAIM_PAYMENT_REFERENCE_INDEX, CLAIMS_SHEET,
)
from .upsert import delete_by_keys, update_by_key, upsert_row

logger = get_logger(__name__)

DATE_FORMAT = '%d/%m/%Y'
_DATE_FORMATS = (DATE_FORMAT, '%Y-%m-%d', '%d/%m/%Y, %H:%M:%S', '%Y-%m-%dT%H:%M:%S')


def today():
    return datetime.now().strftime(DATE_FORMAT)


def parse_date(value):
    value = text(value)
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return datetime.min


def claim_to_row(claim):
    return [
        claim.invoice_number,
        claim.guardian_name,
        claim.guardian_phone,
        claim.relationship,
        claim.student_name,
        claim.class_name,
        claim.total_fees_balance,
        claim.due_date,
        claim.timestamp or today(),
        format_bool(claim.paid),
        claim.payment_date,
        claim.payment_reference,
    ]


def claim_to_invoice(claim):
    return Invoice(
        id=claim.invoice_number,
        amount=claim.total_fees_balance,
        status='PAID' if claim.paid else 'PENDING',
        created_at=claim.timestamp,
        updated_at=claim.payment_date or claim.timestamp,
        description=f'Fee payment for {claim.student_name} ({claim.class_name})',
        reference=claim.payment_reference,
        guardian_name=claim.guardian_name,
        guardian_phone=claim.guardian_phone,
        student_name=claim.student_name,
        student_class=claim.class_name,
        due_date=claim.due_date,
    )


def next_invoice_number(prefix, existing):
    """Next '{prefix}--NNNN' number after the highest existing suffix"""
    pattern = re.compile(re.escape(prefix) + r'-*(\d+)$')
    highest = 0
    for number in existing:
        match = pattern.match(text(number))
        if match:
            highest = max(highest, int(match.group(1)))
    return f'{prefix}--{highest + 1:04d}'


class ClaimsRepository:
    """Claims are hard-deleted; a removed invoice leaves no row behind"""

    field_index = {c.field: c.index for c in CLAIM_COLUMNS.columns}

    def __init__(self, client, policy=None, sleep=time.sleep):
        self.client = client
        self.policy = policy
        self.sleep = sleep

    def get_claims(self):
        rows = retry_read(
            lambda: self.client.fetch_rows(CLAIMS_SHEET),
            default=list,
            policy=self.policy,
            description='fetch claims',
            sleep=self.sleep,
        )
        return [
            Claim(**values)
            for _, values in CLAIM_COLUMNS.map_rows(rows)
            if values['invoice_number']
        ]

    def get_claim(self, invoice_number):
        for claim in self.get_claims():
            if claim.invoice_number == invoice_number:
                return claim
        return None

    def save_claim(self, claim):
        """Create or overwrite the claim row for claim.invoice_number"""
        if not text(claim.invoice_number):
            return WriteResult.fail(VALIDATION, 'Invoice number is required')
        result = upsert_row(self.client, CLAIMS_SHEET, CLAIM_HEADERS, claim_to_row(claim), CLAIM_KEY)
        if result.success:
            logger.info('Claim %s %s', claim.invoice_number, result.data['action'])
        return result

    def delete_claim(self, invoice_number):
        return delete_by_keys(self.client, CLAIMS_SHEET, CLAIM_KEY, [(invoice_number,)])

    def delete_claims(self, invoice_numbers):
        if not invoice_numbers:
            return WriteResult.fail(VALIDATION, 'No invoice numbers given')
        return delete_by_keys(self.client, CLAIMS_SHEET, CLAIM_KEY, [(n,) for n in invoice_numbers])

    def update_invoice_payment_status(self, invoice_number, paid=True, payment_date=None,
                                      payment_reference=''):
        changes = {
            CLAIM_PAID_INDEX: format_bool(paid),
            CLAIM_PAYMENT_DATE_INDEX: (payment_date or today()) if paid else '',
            CLAIM_PAYMENT_REFERENCE_INDEX: payment_reference if paid else '',
        }
        result = update_by_key(self.client, CLAIMS_SHEET, CLAIM_KEY, (invoice_number,), changes,
                               width=len(CLAIM_HEADERS))
        if result.success:
            logger.info('Invoice %s marked %s', invoice_number, 'paid' if paid else 'unpaid')
        return result

    def update_invoice(self, invoice_number, **fields):
        """Partial update of a claim row; untouched cells keep their values"""
        unknown = set(fields) - set(self.field_index)
        if unknown or 'invoice_number' in fields:
            bad = ', '.join(sorted(unknown | ({'invoice_number'} & set(fields))))
            return WriteResult.fail(VALIDATION, f'Cannot update fields: {bad}')
        changes = {}
        for name, value in fields.items():
            if name == 'paid':
                value = format_bool(value)
            elif name == 'total_fees_balance':
                value = parse_currency(value)
            changes[self.field_index[name]] = value
        return update_by_key(self.client, CLAIMS_SHEET, CLAIM_KEY, (invoice_number,), changes,
                             width=len(CLAIM_HEADERS))

    def get_invoices(self):
        return [claim_to_invoice(c) for c in self.get_claims()]

    def get_claims_for_invoice_generation(self):
        """Invoice numbers, most recent claim first"""
        claims = sorted(self.get_claims(), key=lambda c: parse_date(c.timestamp), reverse=True)
        return [c.invoice_number for c in claims]

    def next_invoice_number(self, prefix):
        """Raises SheetAccessError when the Claims sheet cannot be read"""
        rows = retry_call(
            lambda: self.client.fetch_rows(CLAIMS_SHEET),
            policy=self.policy,
            description='read invoice numbers',
            sleep=self.sleep,
        )
        numbers = [values['invoice_number'] for _, values in CLAIM_COLUMNS.map_rows(rows)]
        return next_invoice_number(prefix, numbers)
