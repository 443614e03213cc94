"""Registration and login."""
import logging

from minitwit.errors import InvalidCredentials, ValidationError
from minitwit.sessions import Authenticated

logger = logging.getLogger(__name__)

MISSING_USERNAME = 'You have to enter a username'
INVALID_EMAIL = 'You have to enter a valid email address'
MISSING_PASSWORD = 'You have to enter a password'
PASSWORD_MISMATCH = 'The two passwords do not match'
USERNAME_TAKEN = 'The username is already taken'

INVALID_USERNAME = 'Invalid username'
INVALID_PASSWORD = 'Invalid password'


class AuthService:

    def __init__(self, store, hasher):
        self.store = store
        self.hasher = hasher

    def register(self, username, email, password, password_confirm):
        """Validates the form and persists a new user.

        Checks run in order and stop at the first failure, which is raised
        as :class:`ValidationError`. The new user is not logged in.
        """
        if not username:
            raise ValidationError(MISSING_USERNAME)
        if not email or '@' not in email:
            raise ValidationError(INVALID_EMAIL)
        if not password:
            raise ValidationError(MISSING_PASSWORD)
        if password != password_confirm:
            raise ValidationError(PASSWORD_MISMATCH)
        if self.store.get_user_id(username) is not None:
            raise ValidationError(USERNAME_TAKEN)

        user = self.store.add_user(username, email, self.hasher.hash(password))
        if user is None:
            raise ValidationError(USERNAME_TAKEN)
        logger.info('Registered user %r (id %s)', username, user.user_id)
        return user

    def login(self, username, password):
        """Returns the principal to store in the caller's session."""
        user = self.store.get_user_by_username(username) if username else None
        if user is None:
            logger.info('Login failed for %r: %s', username, INVALID_USERNAME)
            raise InvalidCredentials(INVALID_USERNAME)
        if not self.hasher.verify(password or '', user.pw_hash):
            logger.info('Login failed for %r: %s', username, INVALID_PASSWORD)
            raise InvalidCredentials(INVALID_PASSWORD)
        return Authenticated(user_id=user.user_id, username=user.username)
