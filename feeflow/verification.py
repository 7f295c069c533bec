"""
Short-lived payment verification codes, one per invoice.

Kept in process memory only. Expired codes are swept on every read and
write, so nothing needs a background timer.
"""
import secrets
import threading
import time

from .models import VerificationCode

DEFAULT_TTL = 10 * 60


def generate_code(length=6):
    return ''.join(secrets.choice('0123456789') for _ in range(length))


class VerificationCodeStore:
    def __init__(self, clock=time.time):
        self.clock = clock
        self._codes = {}
        self._lock = threading.Lock()

    def _sweep(self):
        now = self.clock()
        for invoice_id in [k for k, v in self._codes.items() if v.expires_at < now]:
            del self._codes[invoice_id]

    def store(self, invoice_id, amount, student_name, code=None, ttl=DEFAULT_TTL):
        """Issue a code for an invoice, replacing any earlier one"""
        entry = VerificationCode(
            code=code or generate_code(),
            invoice_id=invoice_id,
            amount=amount,
            student_name=student_name,
            expires_at=self.clock() + ttl,
        )
        with self._lock:
            self._codes[invoice_id] = entry
            self._sweep()
        return entry

    def get(self, invoice_id):
        with self._lock:
            self._sweep()
            return self._codes.get(invoice_id)

    def verify(self, invoice_id, code):
        """True if code matches the live code for invoice_id; a match consumes it"""
        with self._lock:
            self._sweep()
            entry = self._codes.get(invoice_id)
            if entry is None or not secrets.compare_digest(entry.code, str(code)):
                return False
            del self._codes[invoice_id]
            return True

    def __len__(self):
        with self._lock:
            self._sweep()
            return len(self._codes)
