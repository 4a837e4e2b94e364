from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base


class ProjectStatus(PyEnum):
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class VolunteerStatus(PyEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    status = Column(Enum(ProjectStatus), nullable=False, default=ProjectStatus.PLANNING)
    lead_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, nullable=True)

    lead = relationship("User")
    allocations = relationship("Allocation", back_populates="project")
    volunteers = relationship("ProjectVolunteer", back_populates="project")


class ProjectVolunteer(Base):
    __tablename__ = "project_volunteers"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_volunteer"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(Enum(VolunteerStatus), nullable=False, default=VolunteerStatus.PENDING)
    applied_at = Column(DateTime, default=datetime.now)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    project = relationship("Project", back_populates="volunteers")
    user = relationship("User", foreign_keys=[user_id])


class Allocation(Base):
    __tablename__ = "allocations"
    __table_args__ = (
        CheckConstraint("allocated_quantity > 0", name="ck_allocations_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    allocated_quantity = Column(Integer, nullable=False)
    allocated_at = Column(DateTime, default=datetime.now)

    item = relationship("Item", back_populates="allocations")
    project = relationship("Project", back_populates="allocations")
