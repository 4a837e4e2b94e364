from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from models.borrowing import RequestStatus

class RequestCreate(BaseModel):
    title: str = Field(min_length=1)
    tool_name: str = Field(min_length=1)
    item_id: Optional[int] = None
    quantity: int = Field(1, gt=0)
    reason: Optional[str] = None
    expected_return_date: Optional[datetime] = None

class RequestResolve(BaseModel):
    reason: Optional[str] = None

class Request(BaseModel):
    id: int
    user_id: int
    title: str
    tool_name: str
    item_id: Optional[int] = None
    quantity: int
    reason: Optional[str] = None
    expected_return_date: Optional[datetime] = None
    status: RequestStatus
    requested_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None
    cancellation_reason: Optional[str] = None

    class Config:
        from_attributes = True

class BorrowingCreate(BaseModel):
    item_id: int
    user_id: int
    quantity: int = Field(1, gt=0)
    expected_return_date: Optional[datetime] = None
    notes: Optional[str] = None

class BorrowingReturn(BaseModel):
    notes: Optional[str] = None

class Borrowing(BaseModel):
    id: int
    user_id: int
    request_id: Optional[int] = None
    item_id: Optional[int] = None
    tool_name: str
    quantity: int
    borrowed_at: datetime
    expected_return_date: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class ApprovalResult(BaseModel):
    request: Request
    borrowing: Borrowing
