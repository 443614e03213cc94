"""Salted one-way password hashing on top of werkzeug.security."""
import logging

from werkzeug.security import check_password_hash, generate_password_hash

from minitwit.errors import HashingError

logger = logging.getLogger(__name__)


class PasswordHasher:

    def __init__(self, method='scrypt', salt_length=16):
        self.method = method
        self.salt_length = salt_length

    def hash(self, plaintext):
        """Returns a freshly salted hash token for ``plaintext``."""
        try:
            return generate_password_hash(
                plaintext, method=self.method, salt_length=self.salt_length)
        except (ValueError, OSError) as exc:
            raise HashingError(str(exc)) from exc

    def verify(self, plaintext, hash_token):
        """True iff ``plaintext`` matches ``hash_token``; a mismatch is not an error."""
        if not hash_token:
            return False
        try:
            return check_password_hash(hash_token, plaintext)
        except ValueError as exc:
            logger.warning('Unreadable password hash: %s', exc)
            return False
