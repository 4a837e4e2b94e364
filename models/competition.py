from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from models.project import VolunteerStatus


class Competition(Base):
    __tablename__ = "competitions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    location = Column(String, nullable=True)
    status = Column(String, nullable=False, default="upcoming")
    created_at = Column(DateTime, default=datetime.now)

    items = relationship("CompetitionItem", back_populates="competition")
    volunteers = relationship("CompetitionVolunteer", back_populates="competition")


class CompetitionItem(Base):
    __tablename__ = "competition_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_competition_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    competition_id = Column(Integer, ForeignKey("competitions.id"), nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    quantity = Column(Integer, nullable=False)

    competition = relationship("Competition", back_populates="items")
    item = relationship("Item")


class CompetitionVolunteer(Base):
    __tablename__ = "competition_volunteers"
    __table_args__ = (UniqueConstraint("competition_id", "user_id", name="uq_competition_volunteer"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    competition_id = Column(Integer, ForeignKey("competitions.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(Enum(VolunteerStatus), nullable=False, default=VolunteerStatus.PENDING)
    applied_at = Column(DateTime, default=datetime.now)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    competition = relationship("Competition", back_populates="volunteers")
    user = relationship("User", foreign_keys=[user_id])
