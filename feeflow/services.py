"""
Wiring: one place that builds the clients and repositories for an app
"""
import time

from .cache import TTLCache
from .claims import ClaimsRepository
from .mobile_users import MobileUserRepository
from .retry import RetryPolicy
from .sba import SBARepository
from .school_config import SchoolConfigRepository
from .sheets import CsvExportSource, SheetClient
from .sms import SmsGateway
from .sms_templates import SmsTemplateService
from .staff import StaffRepository
from .students import StudentRepository
from .verification import VerificationCodeStore


class Services:
    def __init__(self, client, source, gateway, policy=None, sleep=time.sleep,
                 template_cache=None, verification_codes=None):
        self.client = client
        self.source = source
        self.gateway = gateway
        self.policy = policy or RetryPolicy()

        self.students = StudentRepository(source, self.policy, sleep)
        self.claims = ClaimsRepository(client, self.policy, sleep)
        self.staff = StaffRepository(client, self.policy, sleep)
        self.mobile_users = MobileUserRepository(source, client, self.policy, sleep)
        self.sba = SBARepository(client, self.policy, sleep)
        self.templates = SmsTemplateService(source, template_cache or TTLCache(300), self.policy, sleep)
        self.school_config = SchoolConfigRepository(source, client, self.templates, self.policy, sleep)
        self.verification_codes = verification_codes or VerificationCodeStore()

    @classmethod
    def from_settings(cls, config):
        """Build production services; raises on missing credentials or sheet id"""
        return cls(
            SheetClient.from_settings(config),
            CsvExportSource.from_settings(config),
            SmsGateway.from_settings(config),
            policy=RetryPolicy.from_settings(config),
            template_cache=TTLCache(ttl=config.get('SMS_TEMPLATE_TTL', 300)),
        )
