"""Key/value operational parameters."""

from sqlalchemy import Column, String, Text

from threadboard.database import Base


class Conf(Base):
    """Operational parameter row."""

    __tablename__ = "conf"

    key = Column(String(64), primary_key=True)
    value = Column(Text)
