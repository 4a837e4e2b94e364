from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from database import Base


class History(Base):
    """Append-only audit trail of user actions."""
    __tablename__ = "history"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    username = Column(String, nullable=True)
    action = Column(String, nullable=False, index=True)
    details = Column(String, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.now)
