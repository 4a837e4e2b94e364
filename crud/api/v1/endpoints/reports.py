from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from deps import require_admin
from models.user import User
from crud import dashboard, reports
from schemas.reports import CategoryShare, DepartmentSubmissionStats, MonthlyActivity, SummaryStats, WeeklyUtilization

router = APIRouter()

@router.get("/monthly-activity", response_model=List[MonthlyActivity])
def get_monthly_activity(
    months: int = Query(6, ge=1, le=24, description="Number of months to include"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Issued vs returned quantities per month
    """
    return reports.monthly_tool_activity(db, months)

@router.get("/categories", response_model=List[CategoryShare])
def get_category_distribution(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return reports.category_distribution(db)

@router.get("/utilization", response_model=List[WeeklyUtilization])
def get_weekly_utilization(
    weeks: int = Query(8, ge=1, le=52, description="Number of weeks to include"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Percentage of total stock on loan at the end of each week
    """
    return reports.weekly_utilization(db, weeks)

@router.get("/summary", response_model=SummaryStats)
def get_summary_stats(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return reports.summary_stats(db)

@router.get("/submissions-by-department", response_model=List[DepartmentSubmissionStats])
def get_submissions_by_department(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return dashboard.submissions_by_department(db)

@router.get("/export/{report_type}")
def export_report(
    report_type: str,
    format: str = Query("pdf", pattern="^(pdf|excel)$"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    content, media_type, filename = reports.export_report(db, report_type, format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
