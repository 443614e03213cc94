from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    __tablename__ = 'user'
    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False)
    pw_hash = Column(String, nullable=False)

    def __repr__(self):
        return '<User %s %r>' % (self.user_id, self.username)


class Follower(Base):
    """who_id follows whom_id; at most one row per ordered pair."""
    __tablename__ = 'follower'
    who_id = Column(Integer, ForeignKey('user.user_id'), primary_key=True)
    whom_id = Column(Integer, ForeignKey('user.user_id'), primary_key=True, index=True)


class Message(Base):
    __tablename__ = 'message'
    __table_args__ = (
        CheckConstraint("text != ''", name='message_text_not_empty'),
    )
    message_id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(Integer, ForeignKey('user.user_id'), nullable=False, index=True)
    text = Column(String, nullable=False)
    # seconds since the epoch
    pub_date = Column(Integer, nullable=False, index=True)
    # moderation flag, hidden from every timeline when non-zero
    flagged = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return '<Message %s by %s>' % (self.message_id, self.author_id)
