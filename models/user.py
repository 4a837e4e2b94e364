from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String

from database import Base


class UserRole(PyEnum):
    ADMIN = "admin"
    MEMBER = "member"


class Gender(PyEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Department(PyEnum):
    MECHANICAL = "mechanical"
    SOFTWARE = "software"
    EMBEDDED = "embedded"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.MEMBER)
    full_name = Column(String, nullable=False)
    roll_number = Column(String, unique=True, nullable=True)
    gender = Column(Enum(Gender), nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=False, index=True)
    department = Column(Enum(Department), nullable=True)
    branch = Column(String, nullable=True)
    is_verified = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, onupdate=datetime.now)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
