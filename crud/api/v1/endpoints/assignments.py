from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from deps import get_current_user, require_admin
from models.user import User
from schemas.assignment import (
    Assignment, AssignmentCreate, AssignmentStats,
    Submission, SubmissionCreate, SubmissionGrade
)
from crud import assignments

router = APIRouter()
submissions_router = APIRouter()

@router.get("/", response_model=List[Assignment])
def list_assignments(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return assignments.list_assignments(db, current_user)

@router.post("/", response_model=Assignment, status_code=201)
def create_assignment(data: AssignmentCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return assignments.create_assignment(db, data, admin)

@router.get("/{assignment_id}", response_model=Assignment)
def get_assignment(assignment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return assignments.get_assignment(db, assignment_id)

@router.get("/{assignment_id}/stats", response_model=AssignmentStats)
def get_assignment_stats(assignment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return assignments.assignment_stats(db, assignment_id)

@router.get("/{assignment_id}/submissions", response_model=List[Submission])
def list_submissions(assignment_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return assignments.list_submissions(db, assignment_id)

@submissions_router.post("/", response_model=Submission, status_code=201)
def submit(data: SubmissionCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return assignments.submit(db, data.assignment_id, data.github_link, current_user)

@submissions_router.get("/mine", response_model=List[Submission])
def my_submissions(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return assignments.my_submissions(db, current_user)

@submissions_router.put("/{submission_id}/grade", response_model=Submission)
def grade_submission(
    submission_id: int,
    data: SubmissionGrade,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return assignments.grade(db, submission_id, data.status, data.feedback, admin)
