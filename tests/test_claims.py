import pytest

from feeflow.claims import ClaimsRepository, claim_to_row, next_invoice_number
from feeflow.errors import NOT_FOUND, VALIDATION, SheetAccessError
from feeflow.models import Claim
from feeflow.schemas import CLAIM_HEADERS


def make_claim(invoice='CEC-INV--0001', balance=500.0, timestamp='01/09/2025', **extra):
    return Claim(
        invoice_number=invoice,
        guardian_name='Kofi Mensah',
        guardian_phone='0244123456',
        relationship='Father',
        student_name='Ama Mensah',
        class_name='BS 1',
        total_fees_balance=balance,
        due_date='30/10/2025',
        timestamp=timestamp,
        **extra
    )


@pytest.fixture
def claims(client, policy, sleeps):
    return ClaimsRepository(client, policy, sleep=sleeps.append)


def test_saving_twice_keeps_one_row(claims, sheets_service):
    first = claims.save_claim(make_claim(balance=500))
    second = claims.save_claim(make_claim(balance=350))

    assert first.data['action'] == 'created'
    assert second.data == {'action': 'updated', 'row': 2}
    rows = sheets_service.rows('Claims')
    assert rows[0] == CLAIM_HEADERS
    assert len(rows) == 2
    assert claims.get_claim('CEC-INV--0001').total_fees_balance == 350


def test_blank_invoice_number_is_rejected(claims, sheets_service):
    result = claims.save_claim(make_claim(invoice='  '))
    assert not result.success
    assert result.kind == VALIDATION
    assert 'Claims' not in sheets_service.sheets


def test_claim_row_layout():
    row = claim_to_row(make_claim(paid=True))
    assert len(row) == len(CLAIM_HEADERS)
    assert row[0] == 'CEC-INV--0001'
    assert row[9] == 'TRUE'


def test_payment_status_touches_payment_columns(claims, sheets_service):
    claims.save_claim(make_claim())
    result = claims.update_invoice_payment_status('CEC-INV--0001', payment_date='05/09/2025',
                                                  payment_reference='MOMO-77')
    assert result.success
    row = sheets_service.rows('Claims')[1]
    assert row[9:12] == ['TRUE', '05/09/2025', 'MOMO-77']
    assert row[4] == 'Ama Mensah'

    claim = claims.get_claim('CEC-INV--0001')
    assert claim.paid is True
    assert claim.payment_reference == 'MOMO-77'

    claims.update_invoice_payment_status('CEC-INV--0001', paid=False)
    assert claims.get_claim('CEC-INV--0001').paid is False
    assert claims.get_claim('CEC-INV--0001').payment_date == ''


def test_payment_status_for_unknown_invoice(claims):
    claims.save_claim(make_claim())
    result = claims.update_invoice_payment_status('CEC-INV--9999')
    assert result.kind == NOT_FOUND


def test_partial_invoice_update(claims):
    claims.save_claim(make_claim())
    assert claims.update_invoice('CEC-INV--0001', total_fees_balance='GHS 120.00', due_date='01/12/2025').success

    claim = claims.get_claim('CEC-INV--0001')
    assert claim.total_fees_balance == 120
    assert claim.due_date == '01/12/2025'
    assert claim.guardian_name == 'Kofi Mensah'

    rejected = claims.update_invoice('CEC-INV--0001', invoice_number='X', colour='red')
    assert rejected.kind == VALIDATION
    assert 'colour' in rejected.message


def test_batch_delete(claims, sheets_service):
    for n in range(1, 5):
        claims.save_claim(make_claim(invoice=f'CEC-INV--000{n}'))

    result = claims.delete_claims(['CEC-INV--0001', 'CEC-INV--0003', 'CEC-INV--0404'])

    assert result.success
    assert result.data['rows'] == [4, 2]
    assert [r[0] for r in sheets_service.rows('Claims')[1:]] == ['CEC-INV--0002', 'CEC-INV--0004']
    assert claims.delete_claims([]).kind == VALIDATION
    assert claims.delete_claim('CEC-INV--0001').kind == NOT_FOUND


def test_invoices_view(claims):
    claims.save_claim(make_claim())
    claims.save_claim(make_claim(invoice='CEC-INV--0002', paid=True, payment_date='02/09/2025'))

    invoices = {i.id: i for i in claims.get_invoices()}
    assert invoices['CEC-INV--0001'].status == 'PENDING'
    assert invoices['CEC-INV--0002'].status == 'PAID'
    assert invoices['CEC-INV--0002'].updated_at == '02/09/2025'
    assert invoices['CEC-INV--0001'].description == 'Fee payment for Ama Mensah (BS 1)'


def test_claims_for_invoice_generation_newest_first(claims):
    claims.save_claim(make_claim(invoice='A', timestamp='01/09/2025'))
    claims.save_claim(make_claim(invoice='B', timestamp='15/09/2025'))
    claims.save_claim(make_claim(invoice='C', timestamp='2025-09-10'))
    assert claims.get_claims_for_invoice_generation() == ['B', 'C', 'A']


def test_next_invoice_number():
    assert next_invoice_number('CEC-INV', []) == 'CEC-INV--0001'
    assert next_invoice_number('CEC-INV', ['CEC-INV--0009', 'CEC-INV--0011', 'OTHER-0100']) == 'CEC-INV--0012'
    assert next_invoice_number('CEC-INV', ['CEC-INV-7']) == 'CEC-INV--0008'


def test_next_invoice_number_from_sheet(claims):
    claims.save_claim(make_claim(invoice='CEC-INV--0041'))
    assert claims.next_invoice_number('CEC-INV') == 'CEC-INV--0042'


def test_next_invoice_number_raises_when_sheet_unreadable(claims, sheets_service, sleeps):
    sheets_service.broken = True
    with pytest.raises(SheetAccessError):
        claims.next_invoice_number('CEC-INV')
    assert sleeps == [2, 4]


def test_unreadable_claims_sheet_reads_as_empty(claims, sheets_service, sleeps):
    sheets_service.add_sheet('Claims', [CLAIM_HEADERS])
    sheets_service.fail_next(3)
    assert claims.get_claims() == []
    assert sheets_service.calls.count('values.get') == 3
