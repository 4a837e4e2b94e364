from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime
from models.user import UserRole, Gender, Department

class UserRegister(BaseModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1)
    email: EmailStr
    roll_number: Optional[str] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    department: Optional[Department] = None
    branch: Optional[str] = None

class UserLogin(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(min_length=1)

class User(BaseModel):
    id: int
    username: str
    role: UserRole
    full_name: str
    email: str
    roll_number: Optional[str] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    department: Optional[Department] = None
    branch: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserSummary(BaseModel):
    id: int
    username: str
    role: UserRole
    full_name: str
    department: Optional[Department] = None

    class Config:
        from_attributes = True

class LoginResponse(BaseModel):
    token: str
    user: User

class RegisterResponse(BaseModel):
    id: int
    message: str

class RoleUpdate(BaseModel):
    role: UserRole

class BulkUser(BaseModel):
    full_name: str
    email: EmailStr
    roll_number: Optional[str] = None
    password: Optional[str] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    department: Optional[Department] = None
    branch: Optional[str] = None

class BulkRegister(BaseModel):
    users: List[BulkUser] = Field(min_length=1)

class BulkRegisterResult(BaseModel):
    success: List[dict]
    failed: List[dict]
