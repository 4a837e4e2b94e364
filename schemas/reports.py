from pydantic import BaseModel
from typing import Optional

class MonthlyActivity(BaseModel):
    month: str
    issued: int
    returned: int

class CategoryShare(BaseModel):
    category: str
    item_count: int
    quantity: int

class WeeklyUtilization(BaseModel):
    week: str
    on_loan: int
    utilization: float

class SummaryStats(BaseModel):
    total_issues_this_month: int
    trend_percent: float
    trend_text: str
    average_borrow_days: float
    most_requested: Optional[str] = None
    most_requested_count: int
    return_rate: float

class DepartmentSubmissionStats(BaseModel):
    department: str
    total_members: int
    submitted_members: int
    submission_percentage: float
    passed_count: int
    failed_count: int
