"""
Bounded retry with linear backoff and default-value fallback for reads.

Writes never go through retry_read: a failed write is reported to the
caller, never replaced by a default.
"""
import time
from dataclasses import dataclass

import requests
from googleapiclient.errors import HttpError

from .app_logger import get_logger
from .errors import SheetAccessError
from .sheets.client import TRANSPORT_ERRORS

logger = get_logger(__name__)

RETRYABLE_ERRORS = (SheetAccessError, requests.RequestException) + TRANSPORT_ERRORS


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    backoff_seconds: float = 2.0

    def delay(self, attempt):
        """Seconds to wait after a failed attempt (1-based): 2s, 4s, 6s"""
        return attempt * self.backoff_seconds

    @classmethod
    def from_settings(cls, config):
        return cls(
            max_attempts=int(config.get('SHEETS_MAX_ATTEMPTS', 3)),
            backoff_seconds=float(config.get('SHEETS_BACKOFF_SECONDS', 2)),
        )


def retry_call(func, policy=None, description='remote read', sleep=time.sleep):
    """Call func until it succeeds or attempts run out; re-raise the last error"""
    policy = policy or RetryPolicy()
    attempts = max(policy.max_attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            result = func()
        except RETRYABLE_ERRORS as exc:
            logger.warning('%s: attempt %d/%d failed: %s', description, attempt, attempts, exc)
            if attempt == attempts:
                raise
            sleep(policy.delay(attempt))
        else:
            logger.info('%s: attempt %d/%d succeeded', description, attempt, attempts)
            return result


def retry_read(func, default, policy=None, description='remote read', sleep=time.sleep):
    """Like retry_call, but return ``default`` once every attempt has failed"""
    try:
        return retry_call(func, policy=policy, description=description, sleep=sleep)
    except RETRYABLE_ERRORS as exc:
        status = exc.resp.status if isinstance(exc, HttpError) else 'n/a'
        logger.error('%s: giving up (status %s), using default', description, status)
        return default() if callable(default) else default
