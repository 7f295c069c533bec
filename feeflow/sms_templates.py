"""
SMS templates from the Template sheet, behind a short-lived cache.

Templates use ``{placeholder}`` tokens. The gateway's OTP endpoint wants
its own ``%OTPCODE%`` and ``%EXPIRY%`` tokens, so OTP templates are
rendered with render_otp_template instead.
"""
import re
import time

from .app_logger import get_logger
from .cache import TTLCache
from .mapper import text
from .models import SmsTemplates
from .retry import RETRYABLE_ERRORS, retry_call
from .schemas import TEMPLATE_COLUMNS, TEMPLATE_SHEET

logger = get_logger(__name__)

DEFAULT_TEMPLATES = SmsTemplates(
    fee_reminder=(
        'Dear {guardianName}, a friendly reminder from {schoolName} that the outstanding '
        'fee balance for {studentName} is GHS {balance}. Payment is due by {dueDate}. Thank you.'
    ),
    admin_activation=(
        '{guardianPhone} Your confirmation code for FeeFlow is: {otpCode}. It expires in '
        '{expiry} minutes. reff. {studentName} - {className} (GHS {totalAmount})'
    ),
    otp='Your {senderId} verification code is: {otpCode}. It expires in {expiry} minutes.',
    activation='Your {senderId} activation code is: {otpCode}. It expires in {expiry} minutes.',
    payment_notification=(
        'Dear {guardianName}, payment of GHS {amount} has been received for {studentName}. '
        'Outstanding balance: GHS {balance}. Thank you for choosing {schoolName}.'
    ),
    admission_notification=(
        'Dear {guardianName}, {studentName} has been admitted to {schoolName} for {className}. '
        'Please complete registration by {dueDate}. Welcome to {schoolName}!'
    ),
)

_PLACEHOLDER = re.compile(r'\{(\w+)\}')
OTP_TOKENS = {'otpCode': '%OTPCODE%', 'expiry': '%EXPIRY%'}


def render(template, **values):
    """Fill {name} tokens; unknown tokens are left in place"""
    def substitute(match):
        name = match.group(1)
        if name in values and values[name] is not None:
            return str(values[name])
        return match.group(0)
    return _PLACEHOLDER.sub(substitute, template)


def render_otp_template(template, **values):
    """Render for the OTP endpoint: code and expiry become gateway tokens"""
    for name, token in OTP_TOKENS.items():
        template = template.replace('{%s}' % name, token)
    return render(template, **values)


def templates_from_rows(rows):
    """Blank message cells fall back to the built-in text; a blank sender stays blank"""
    defaults = DEFAULT_TEMPLATES.to_dict()
    values = {}
    for _, mapped in TEMPLATE_COLUMNS.map_rows(rows):
        values = mapped
        break
    merged = {name: text(values.get(name)) or default for name, default in defaults.items()}
    merged['sender_id'] = text(values.get('sender_id'))
    return SmsTemplates(**merged)


class SmsTemplateService:
    def __init__(self, source, cache=None, policy=None, sleep=time.sleep):
        self.source = source
        self.cache = cache or TTLCache(ttl=300)
        self.policy = policy
        self.sleep = sleep

    def get_templates(self):
        cached = self.cache.fresh()
        if cached is not None:
            return cached

        try:
            rows = retry_call(
                lambda: self.source.fetch_rows(TEMPLATE_SHEET),
                policy=self.policy,
                description='fetch SMS templates',
                sleep=self.sleep,
            )
        except RETRYABLE_ERRORS:
            stale = self.cache.stale()
            if stale is not None:
                logger.warning('Template refresh failed, serving cached templates')
                return stale
            logger.warning('Template refresh failed, serving built-in templates')
            return DEFAULT_TEMPLATES

        return self.cache.store(templates_from_rows(rows))

    def get_sender_id(self):
        """Sender id named on the Template sheet, or '' when it names none"""
        return self.get_templates().sender_id

    def clear_cache(self):
        self.cache.clear()
        logger.info('SMS template cache cleared')
