"""SQLAlchemy-backed store for users, messages and follow edges."""
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from minitwit.errors import StorageError
from minitwit.models import Base, Follower, Message, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedEntry:
    """A message joined with its author's metadata."""
    message_id: int
    author_id: int
    username: str
    email: str
    text: str
    pub_date: int

    @classmethod
    def from_row(cls, message, author):
        return cls(
            message_id=message.message_id,
            author_id=author.user_id,
            username=author.username,
            email=author.email,
            text=message.text,
            pub_date=message.pub_date,
        )


def _engine_connect_args(url):
    if url.startswith('sqlite'):
        return {'check_same_thread': False}
    return {}


class Store:
    """Runs every read and write in its own short-lived session."""

    def __init__(self, database_url):
        self.engine = create_engine(
            database_url, connect_args=_engine_connect_args(database_url))
        self._sessions = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False)

    def init_db(self):
        """creates the database tables"""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            logger.error('Could not create schema: %s', exc)
            raise StorageError(str(exc)) from exc

    @contextmanager
    def session(self):
        db = self._sessions()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error('Database error: %s', exc)
            raise StorageError(str(exc)) from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # users

    def get_user_id(self, username):
        """Look up the id for a username."""
        with self.session() as db:
            row = db.query(User.user_id).filter(User.username == username).first()
        return row.user_id if row else None

    def get_user(self, user_id):
        with self.session() as db:
            return db.get(User, user_id)

    def get_user_by_username(self, username):
        with self.session() as db:
            return db.query(User).filter(User.username == username).first()

    def add_user(self, username, email, pw_hash):
        """Inserts a user, or returns None if the username was taken meanwhile."""
        db = self._sessions()
        try:
            user = User(username=username, email=email, pw_hash=pw_hash)
            db.add(user)
            db.commit()
            return user
        except IntegrityError:
            db.rollback()
            logger.info('Username %r was registered concurrently', username)
            return None
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error('Database error: %s', exc)
            raise StorageError(str(exc)) from exc
        finally:
            db.close()

    # messages

    def add_message(self, author_id, text, pub_date=None):
        if not text:
            raise ValueError('message text must not be empty')
        if pub_date is None:
            pub_date = int(time.time())
        with self.session() as db:
            message = Message(author_id=author_id, text=text,
                              pub_date=pub_date, flagged=0)
            db.add(message)
        return message

    def set_flagged(self, message_id, flagged=True):
        with self.session() as db:
            updated = db.query(Message).filter(
                Message.message_id == message_id).update(
                    {Message.flagged: int(flagged)})
        return updated > 0

    def messages(self, limit, author_ids=None):
        """Non-flagged messages, newest first.

        ``author_ids`` of ``None`` means every author; an empty collection
        matches nothing. Equal timestamps keep insertion order.
        """
        if author_ids is not None and not author_ids:
            return []
        with self.session() as db:
            query = db.query(Message, User).join(
                User, Message.author_id == User.user_id).filter(
                    Message.flagged == 0)
            if author_ids is not None:
                query = query.filter(Message.author_id.in_(list(author_ids)))
            rows = query.order_by(
                Message.pub_date.desc(), Message.message_id.asc()).limit(limit).all()
            return [FeedEntry.from_row(message, author) for message, author in rows]

    # follow edges

    def follow_exists(self, who_id, whom_id):
        with self.session() as db:
            row = db.query(Follower).filter(
                Follower.who_id == who_id, Follower.whom_id == whom_id).first()
        return row is not None

    def add_follower(self, who_id, whom_id):
        """Creates the edge unless it exists; returns True if a row was added."""
        if self.follow_exists(who_id, whom_id):
            return False
        db = self._sessions()
        try:
            db.add(Follower(who_id=who_id, whom_id=whom_id))
            db.commit()
            return True
        except IntegrityError:
            # a concurrent follow inserted the same pair first
            db.rollback()
            return False
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error('Database error: %s', exc)
            raise StorageError(str(exc)) from exc
        finally:
            db.close()

    def delete_followers(self, who_id, whom_id):
        with self.session() as db:
            return db.query(Follower).filter(
                Follower.who_id == who_id, Follower.whom_id == whom_id).delete()

    def followed_ids(self, who_id):
        with self.session() as db:
            rows = db.query(Follower.whom_id).filter(Follower.who_id == who_id).all()
        return [row.whom_id for row in rows]
