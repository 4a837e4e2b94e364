from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from database import Base


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
        CheckConstraint("available_quantity >= 0", name="ck_items_available_non_negative"),
        CheckConstraint("available_quantity <= quantity", name="ck_items_available_within_total"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=True)
    description = Column(String, nullable=True)
    cabinet = Column(String, nullable=True)
    # total owned
    quantity = Column(Integer, nullable=False, default=0)
    # on hand; written only by crud.ledger
    available_quantity = Column(Integer, nullable=False, default=0)
    location_x = Column(Float, nullable=True)
    location_y = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    transactions = relationship("Transaction", back_populates="item")
    allocations = relationship("Allocation", back_populates="item")
    borrowings = relationship("Borrowing", back_populates="item")


class TransactionType(PyEnum):
    ISSUE = "issue"
    RETURN = "return"


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transactions_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(Enum(TransactionType), nullable=False)
    quantity = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False, default=datetime.now)

    item = relationship("Item", back_populates="transactions")
    user = relationship("User")
