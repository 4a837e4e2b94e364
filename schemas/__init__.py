from .user import User, UserRegister, UserLogin, LoginResponse, RegisterResponse, RoleUpdate, BulkRegister
from .inventory import Item, ItemCreate, ItemUpdate, StockMovement, Transaction
from .project import (
    Project, ProjectCreate, ProjectUpdate,
    Volunteer, VolunteerResolve,
    Allocation, AllocationCreate
)
from .borrowing import Request, RequestCreate, RequestResolve, Borrowing, BorrowingCreate, BorrowingReturn, ApprovalResult
from .competition import Competition, CompetitionCreate, CompetitionItem, CompetitionItemCreate
from .assignment import Assignment, AssignmentCreate, AssignmentStats, Submission, SubmissionCreate, SubmissionGrade
from .history import HistoryRecord, HistoryPage
from .reports import MonthlyActivity, CategoryShare, WeeklyUtilization, SummaryStats, DepartmentSubmissionStats
