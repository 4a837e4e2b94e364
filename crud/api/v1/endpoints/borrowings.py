from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from deps import get_current_user, require_admin
from models.user import User
from schemas.borrowing import Borrowing, BorrowingCreate, BorrowingReturn
from crud import borrowings

router = APIRouter()

@router.get("/", response_model=List[Borrowing])
def list_borrowings(
    active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return borrowings.list_borrowings(db, current_user, active)

@router.post("/", response_model=Borrowing, status_code=201)
def create_borrowing(data: BorrowingCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return borrowings.create_borrowing(db, data, admin)

@router.api_route("/{borrowing_id}/return", methods=["POST", "PUT"], response_model=Borrowing)
def return_borrowing(
    borrowing_id: int,
    data: Optional[BorrowingReturn] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return borrowings.return_borrowing(db, borrowing_id, current_user, data.notes if data else None)
