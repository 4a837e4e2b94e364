from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from deps import get_current_user
from models.user import User
from schemas.history import HistoryPage
from crud import history
from crud.history import MAX_PAGE_SIZE

router = APIRouter()

@router.get("/", response_model=HistoryPage)
def list_history(
    action: Optional[str] = None,
    user_id: Optional[int] = None,
    limit: int = Query(100, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Audit trail, newest first. Members only ever see their own entries.
    """
    return history.list_history(db, current_user, action, user_id, limit, offset)
