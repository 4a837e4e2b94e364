from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from database import Base


class RequestStatus(PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Request(Base):
    __tablename__ = "requests"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_requests_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String, nullable=False)
    tool_name = Column(String, nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    reason = Column(String, nullable=True)
    expected_return_date = Column(DateTime, nullable=True)
    status = Column(Enum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    requested_at = Column(DateTime, default=datetime.now)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(String, nullable=True)

    user = relationship("User", foreign_keys=[user_id])
    resolver = relationship("User", foreign_keys=[resolved_by])
    borrowing = relationship("Borrowing", back_populates="request", uselist=False)


class Borrowing(Base):
    __tablename__ = "borrowings"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_borrowings_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    request_id = Column(Integer, ForeignKey("requests.id"), nullable=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=True)
    tool_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    borrowed_at = Column(DateTime, nullable=False, default=datetime.now)
    expected_return_date = Column(DateTime, nullable=True)
    # NULL while the borrowing is open
    returned_at = Column(DateTime, nullable=True)
    notes = Column(String, nullable=True)

    user = relationship("User")
    item = relationship("Item", back_populates="borrowings")
    request = relationship("Request", back_populates="borrowing")

    @property
    def is_open(self) -> bool:
        return self.returned_at is None
