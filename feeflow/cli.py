"""
Operational commands, run as ``flask --app app <group> <command>``
"""
import click
from flask import current_app
from flask.cli import AppGroup

sheets_cli = AppGroup('sheets', help='Inspect and prepare spreadsheet tabs.')
students_cli = AppGroup('students', help='Student roster queries.')
sba_cli = AppGroup('sba', help='SBA sheet maintenance.')
templates_cli = AppGroup('templates', help='SMS template cache.')


def _services():
    return current_app.extensions['feeflow']


@sheets_cli.command('list')
def list_sheets():
    """List the tabs in the spreadsheet."""
    result = _services().client.list_sheets()
    if not result.success:
        raise click.ClickException(result.message)
    for sheet in result.data:
        click.echo(f"{sheet['sheet_id']}\t{sheet['title']}")


@sheets_cli.command('ensure')
@click.argument('name')
def ensure_sheet(name):
    """Create a tab unless it already exists."""
    result = _services().client.ensure_sheet_exists(name)
    if not result.success:
        raise click.ClickException(result.message)
    click.echo(result.message)


@students_cli.command('count')
@click.option('--class', 'class_name', default=None, help='Only count one class.')
def count_students(class_name):
    """Print the number of students on the roster."""
    repo = _services().students
    if class_name:
        click.echo(len(repo.get_students_by_class(class_name)))
    else:
        click.echo(repo.get_total_students_count())


@sba_cli.command('init')
def init_sba():
    """Create the SBA sheet with its header row."""
    result = _services().sba.init_sba_sheet()
    if not result.success:
        raise click.ClickException(result.message)
    click.echo('SBA sheet ready')


@templates_cli.command('show')
def show_templates():
    """Print the SMS templates currently in effect."""
    svc = _services()
    templates = svc.templates.get_templates().to_dict()
    templates['sender_id'] = svc.school_config.get_school_config().sender_id
    for name, value in templates.items():
        click.echo(f'{name}: {value}')


@templates_cli.command('clear-cache')
def clear_templates():
    """Drop cached templates so the next read refetches."""
    _services().templates.clear_cache()
    click.echo('SMS template cache cleared')


def register_commands(app):
    for group in (sheets_cli, students_cli, sba_cli, templates_cli):
        app.cli.add_command(group)
