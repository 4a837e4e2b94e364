from typing import List

from sqlalchemy import case, distinct, func
from sqlalchemy.orm import Session

from models.assignment import Assignment, Submission, SubmissionStatus
from models.borrowing import Borrowing, Request, RequestStatus
from models.history import History
from models.user import User, UserRole


def dashboard_summary(db: Session, user: User) -> dict:
    if user.is_admin:
        recent_requests = (
            db.query(Request, User.username)
            .join(User, Request.user_id == User.id)
            .order_by(Request.requested_at.desc(), Request.id.desc())
            .limit(5)
            .all()
        )
        return {
            "role": "admin",
            "metrics": {
                "pendingRequests": db.query(Request).filter(Request.status == RequestStatus.PENDING).count(),
                "activeBorrowings": db.query(Borrowing).filter(Borrowing.returned_at.is_(None)).count(),
                "totalAssignments": db.query(Assignment).count(),
                "pendingSubmissions": db.query(Submission).filter(
                    Submission.status == SubmissionStatus.PENDING).count(),
            },
            "recent": {
                "requests": [_request_row(r, username) for r, username in recent_requests],
                "history": [
                    {
                        "id": h.id,
                        "user_id": h.user_id,
                        "username": h.username,
                        "action": h.action,
                        "details": h.details,
                        "timestamp": h.timestamp,
                    }
                    for h in db.query(History).order_by(History.timestamp.desc(), History.id.desc()).limit(10)
                ],
            },
        }

    assignments = (
        db.query(Assignment)
        .filter(Assignment.department == user.department)
        .order_by(Assignment.due_date.asc())
        .limit(5)
        .all()
    ) if user.department is not None else []
    my_requests = (
        db.query(Request)
        .filter(Request.user_id == user.id)
        .order_by(Request.requested_at.desc(), Request.id.desc())
        .limit(5)
        .all()
    )
    my_borrowings = (
        db.query(Borrowing)
        .filter(Borrowing.user_id == user.id)
        .order_by(Borrowing.borrowed_at.desc(), Borrowing.id.desc())
        .limit(5)
        .all()
    )
    return {
        "role": "member",
        "metrics": {
            "pendingRequests": db.query(Request).filter(
                Request.user_id == user.id, Request.status == RequestStatus.PENDING).count(),
            "activeBorrowings": db.query(Borrowing).filter(
                Borrowing.user_id == user.id, Borrowing.returned_at.is_(None)).count(),
            "assignmentsAvailable": len(assignments),
        },
        "recent": {
            "requests": [_request_row(r) for r in my_requests],
            "borrowings": [
                {
                    "id": b.id,
                    "tool_name": b.tool_name,
                    "quantity": b.quantity,
                    "borrowed_at": b.borrowed_at,
                    "expected_return_date": b.expected_return_date,
                    "returned_at": b.returned_at,
                }
                for b in my_borrowings
            ],
            "assignments": [
                {
                    "id": a.id,
                    "title": a.title,
                    "department": a.department.value if a.department else None,
                    "due_date": a.due_date,
                    "resource_url": a.resource_url,
                }
                for a in assignments
            ],
        },
    }


def _request_row(request: Request, username: str = None) -> dict:
    row = {
        "id": request.id,
        "user_id": request.user_id,
        "title": request.title,
        "tool_name": request.tool_name,
        "quantity": request.quantity,
        "status": request.status.value,
        "requested_at": request.requested_at,
    }
    if username is not None:
        row["username"] = username
    return row


def submissions_by_department(db: Session) -> List[dict]:
    rows = (
        db.query(
            User.department,
            func.count(distinct(User.id)).label("total_members"),
            func.count(distinct(Submission.user_id)).label("submitted_members"),
            func.sum(case((Submission.status == SubmissionStatus.PASS, 1), else_=0)).label("passed_count"),
            func.sum(case((Submission.status == SubmissionStatus.FAIL, 1), else_=0)).label("failed_count"),
        )
        .outerjoin(Submission, Submission.user_id == User.id)
        .filter(User.role == UserRole.MEMBER, User.department.isnot(None))
        .group_by(User.department)
        .all()
    )
    return [
        {
            "department": row.department.value,
            "total_members": row.total_members,
            "submitted_members": row.submitted_members,
            "submission_percentage": round(100.0 * row.submitted_members / row.total_members, 2)
            if row.total_members else 0.0,
            "passed_count": int(row.passed_count or 0),
            "failed_count": int(row.failed_count or 0),
        }
        for row in rows
    ]
