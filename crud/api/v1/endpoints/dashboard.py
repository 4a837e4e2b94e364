from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database import get_db
from deps import get_current_user
from models.user import User
from crud import dashboard

router = APIRouter()

@router.get("/summary")
def get_dashboard_summary(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    Get dashboard overview data:
    - Admins: request, borrowing and submission counters plus recent activity
    - Members: their own requests and borrowings and their department's assignments
    """
    return dashboard.dashboard_summary(db, current_user)
