from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime
from models.project import ProjectStatus, VolunteerStatus

class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    lead_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    lead_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class Project(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    lead_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    lead_name: Optional[str] = None
    lead_email: Optional[str] = None
    volunteer_count: int = 0

    class Config:
        from_attributes = True

class Volunteer(BaseModel):
    id: int
    user_id: int
    status: VolunteerStatus
    applied_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None

    class Config:
        from_attributes = True

class VolunteerResolve(BaseModel):
    status: Literal["accepted", "rejected"]

class AllocationCreate(BaseModel):
    item_id: int
    project_id: int
    # zero and negatives are rejected by the ledger with a 400
    allocated_quantity: int

class Allocation(BaseModel):
    id: int
    item_id: int
    project_id: int
    allocated_quantity: int
    allocated_at: Optional[datetime] = None
    item_name: Optional[str] = None
    project_name: Optional[str] = None

    class Config:
        from_attributes = True
