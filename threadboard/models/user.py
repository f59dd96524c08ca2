"""User account model."""

from sqlalchemy import Column, Integer, String, Text, text

from threadboard.database import Base


class Grade:
    """Trust levels stored in ``users.grade``."""

    BANNED = -2
    MUTED = -1
    NORMAL = 0
    PRIVILEGED = 1
    MODERATOR = 2


class User(Base):
    """User account model."""

    __tablename__ = "users"

    uid = Column(Integer, primary_key=True, autoincrement=True)
    grade = Column(Integer, nullable=False, server_default=text("0"))
    time = Column(Integer, nullable=False, server_default=text("0"))
    mail = Column(String(320), nullable=False, unique=True)
    name = Column(String(64), nullable=False, unique=True)
    hash = Column(Text, nullable=False, server_default=text("''"))
    credits = Column(Integer, nullable=False, server_default=text("0"))
    golds = Column(Integer, nullable=False, server_default=text("0"))
    last_time = Column(Integer, nullable=False, server_default=text("0"))
    last_read = Column(Integer, nullable=False, server_default=text("0"))

    __table_args__ = ({"sqlite_autoincrement": True},)
