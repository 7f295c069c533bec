"""
Error types and result objects shared by the FeeFlow data layer
"""
from dataclasses import dataclass, field
from typing import Any

NOT_FOUND = 'not_found'
TRANSPORT = 'transport'
VALIDATION = 'validation'
CONFLICT = 'conflict'


class FeeFlowError(Exception):
    """Base class for every error raised by feeflow"""


class ConfigurationError(FeeFlowError):
    """Required configuration is missing, e.g. the spreadsheet id"""


class CredentialsError(ConfigurationError):
    """Service-account key material is missing or malformed"""


class SheetAccessError(FeeFlowError):
    """A sheet could not be read where a caller needs the rows"""

    def __init__(self, sheet, message):
        super().__init__(f"{sheet}: {message}")
        self.sheet = sheet
        self.message = message


@dataclass
class SheetResult:
    success: bool
    message: str = ''
    data: Any = field(default_factory=list)

    def __bool__(self):
        return self.success


@dataclass
class WriteResult:
    success: bool
    message: str = ''
    kind: str = ''
    data: Any = None

    def __bool__(self):
        return self.success

    @classmethod
    def ok(cls, message, data=None):
        return cls(True, message, '', data)

    @classmethod
    def fail(cls, kind, message):
        return cls(False, message, kind, None)

    def to_dict(self):
        payload = {'success': self.success, 'message': self.message}
        if self.kind:
            payload['error'] = self.kind
        if self.data is not None:
            payload['data'] = self.data
        return payload
