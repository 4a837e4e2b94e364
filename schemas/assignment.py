from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime
from models.user import Department
from models.assignment import SubmissionStatus

class AssignmentCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    department: Department
    due_date: Optional[datetime] = None
    resource_url: Optional[str] = None

class Assignment(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    department: Optional[Department] = None
    due_date: Optional[datetime] = None
    resource_url: Optional[str] = None
    status: str
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AssignmentStats(BaseModel):
    assignment_id: int
    assigned_count: int
    submission_count: int

class SubmissionCreate(BaseModel):
    assignment_id: int
    github_link: str = Field(min_length=1)

class SubmissionGrade(BaseModel):
    status: Literal["pass", "fail"]
    feedback: Optional[str] = None

class Submission(BaseModel):
    id: int
    assignment_id: int
    user_id: int
    github_link: str
    status: SubmissionStatus
    feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None
    graded_by: Optional[int] = None
    full_name: Optional[str] = None
    assignment_title: Optional[str] = None

    class Config:
        from_attributes = True
