from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from deps import get_current_user, require_admin
from models.borrowing import RequestStatus
from models.user import User
from schemas.borrowing import ApprovalResult, Request, RequestCreate, RequestResolve
from crud import tool_requests
from crud.errors import InsufficientStock

router = APIRouter()

@router.get("/", response_model=List[Request])
def list_requests(
    status: Optional[RequestStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return tool_requests.list_requests(db, current_user, status)

@router.post("/", response_model=Request, status_code=201)
def create_request(data: RequestCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return tool_requests.create(
        db,
        current_user,
        data.title,
        data.tool_name,
        data.quantity,
        data.reason,
        data.expected_return_date,
        data.item_id,
    )

@router.post("/{request_id}/approve", response_model=ApprovalResult)
def approve_request(request_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        request, borrowing = tool_requests.approve(db, request_id, admin)
    except InsufficientStock as e:
        # the request is still pending; report it as a conflict with current stock
        raise HTTPException(status_code=409, detail=e.detail)
    return {"request": request, "borrowing": borrowing}

@router.post("/{request_id}/reject", response_model=Request)
def reject_request(
    request_id: int,
    data: Optional[RequestResolve] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return tool_requests.reject(db, request_id, admin, data.reason if data else None)

@router.post("/{request_id}/cancel", response_model=Request)
def cancel_request(
    request_id: int,
    data: Optional[RequestResolve] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return tool_requests.cancel(db, request_id, current_user, data.reason if data else None)
