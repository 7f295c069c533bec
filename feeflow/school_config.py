"""
School settings from the Config sheet
"""
import time

from .app_logger import get_logger
from .errors import NOT_FOUND, TRANSPORT, WriteResult
from .mapper import parse_bool, text
from .models import NotificationSettings, SchoolConfig
from .retry import retry_read
from .schemas import CONFIG_COLUMNS, CONFIG_SHEET, NOTIFICATION_FIELDS

logger = get_logger(__name__)


def _flag(value, default):
    return parse_bool(value) if text(value) else default


def config_from_rows(rows, sender_id=None):
    defaults = SchoolConfig()
    mapped = next((values for _, values in CONFIG_COLUMNS.map_rows(rows)), None)
    if mapped is None:
        if sender_id:
            defaults.sender_id = sender_id
        return defaults

    default_flags = NotificationSettings()
    notifications = NotificationSettings(**{
        name: _flag(mapped[name], getattr(default_flags, name)) for name in NOTIFICATION_FIELDS
    })
    return SchoolConfig(
        school_name=mapped['school_name'] or defaults.school_name,
        address=mapped['address'] or defaults.address,
        momo_number=mapped['momo_number'],
        due_date=mapped['due_date'],
        invoice_prefix=mapped['invoice_prefix'] or defaults.invoice_prefix,
        sender_id=sender_id or mapped['sender_id'] or defaults.sender_id,
        notifications=notifications,
    )


class SchoolConfigRepository:
    def __init__(self, source, client, templates=None, policy=None, sleep=time.sleep):
        self.source = source
        self.client = client
        self.templates = templates
        self.policy = policy
        self.sleep = sleep

    def get_school_config(self):
        rows = retry_read(
            lambda: self.source.fetch_rows(CONFIG_SHEET),
            default=list,
            policy=self.policy,
            description='fetch school config',
            sleep=self.sleep,
        )
        sender_id = self.templates.get_sender_id() if self.templates else None
        config = config_from_rows(rows, sender_id)
        logger.info('School config loaded for %s', config.school_name)
        return config

    def save_notification_settings(self, settings):
        """Write the four notification flags into the config row, keeping other cells"""
        read = self.client.read_range(CONFIG_SHEET)
        if not read.success:
            return WriteResult.fail(TRANSPORT, read.message)
        if len(read.data) < 2:
            return WriteResult.fail(NOT_FOUND, 'No config data found in Config sheet')

        positions = CONFIG_COLUMNS.resolve(read.data[0])
        row = list(read.data[1])
        width = max([len(row), CONFIG_COLUMNS.width] + [positions[f] + 1 for f in NOTIFICATION_FIELDS])
        row.extend([''] * (width - len(row)))
        for name in NOTIFICATION_FIELDS:
            row[positions[name]] = 'true' if getattr(settings, name) else 'false'

        written = self.client.write_row(CONFIG_SHEET, 2, row)
        if not written.success:
            return WriteResult.fail(TRANSPORT, written.message)
        logger.info('Notification settings saved')
        return WriteResult.ok('Notification settings saved', settings.to_dict())
