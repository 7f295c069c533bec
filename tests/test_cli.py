import pytest

from feeflow.schemas import SBA_HEADERS


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_sheets_list_and_ensure(runner, sheets_service):
    created = runner.invoke(args=['sheets', 'ensure', 'Claims'])
    assert created.exit_code == 0
    assert 'Created sheet "Claims"' in created.output

    again = runner.invoke(args=['sheets', 'ensure', 'Claims'])
    assert 'exists' in again.output

    listed = runner.invoke(args=['sheets', 'list'])
    assert listed.output.strip() == '100\tClaims'


def test_sheets_list_reports_failures(runner, sheets_service):
    sheets_service.broken = True
    result = runner.invoke(args=['sheets', 'list'])
    assert result.exit_code != 0
    assert 'Failed to list sheets' in result.output


def test_students_count(runner):
    assert runner.invoke(args=['students', 'count']).output.strip() == '3'
    assert runner.invoke(args=['students', 'count', '--class', 'BS 2']).output.strip() == '1'


def test_sba_init(runner, sheets_service):
    result = runner.invoke(args=['sba', 'init'])
    assert result.exit_code == 0
    assert sheets_service.rows('SBA') == [SBA_HEADERS]


def test_templates_commands(runner):
    shown = runner.invoke(args=['templates', 'show'])
    assert 'sender_id: CHARIOT EDU' in shown.output
    assert runner.invoke(args=['templates', 'clear-cache']).output.strip() == 'SMS template cache cleared'
