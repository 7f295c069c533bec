import pytest

from feeflow import create_app
from feeflow.retry import RetryPolicy
from feeflow.services import Services
from feeflow.sheets import SheetClient
from feeflow.sms import SmsGateway
from tests.fakes import FakeCsvSource, FakeSession, FakeSheetsService

STUDENT_HEADER = [
    'No.', 'NAME', 'GRADE', 'Student Type', 'GENDER', 'Parent Name', 'Contact',
    'ARREAS', 'BOOKS Fees', 'School Fees AMOUNT', 'INTIAL AMOUNT PAID',
    'PAYMENT', 'BOOKS Fees Payment', 'Total Balance',
]

STUDENT_ROWS = [
    STUDENT_HEADER,
    ['1', 'Ama Mensah', 'BS 1', 'Old', 'Female', 'Kofi Mensah', '0244123456',
     '200', '150', 'GHS 1,200.00', '300', '50', '100', 'GHS 1,000.00'],
    ['2', 'Smith, John', 'BS 2', 'New', 'Male', 'Jane Smith', '+233201234567',
     '0', '150', '1,200.00', '0', '0', '0', '1,350.00'],
    ['3', 'Yaw Boateng', 'BS 1', 'Old', '', 'Abena Boateng', '', '', '', '900', '900', '', '', '0'],
]


@pytest.fixture
def sheets_service():
    return FakeSheetsService()


@pytest.fixture
def client(sheets_service):
    return SheetClient('test-sheet', sheets_service)


@pytest.fixture
def sleeps():
    """Collects requested backoff delays instead of sleeping"""
    return []


@pytest.fixture
def policy():
    return RetryPolicy(max_attempts=3, backoff_seconds=2)


@pytest.fixture
def csv_source():
    return FakeCsvSource({'Metadata': STUDENT_ROWS})


@pytest.fixture
def sms_session():
    return FakeSession()


@pytest.fixture
def gateway(sms_session):
    return SmsGateway('test-key', 'test-user', session=sms_session)


@pytest.fixture
def services(client, csv_source, gateway, policy, sleeps):
    return Services(client, csv_source, gateway, policy=policy, sleep=sleeps.append)


@pytest.fixture
def app(services):
    return create_app('testing', services=services)


@pytest.fixture
def http(app):
    return app.test_client()
