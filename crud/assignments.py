import logging
from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud import history
from crud.errors import DuplicateError, NotFound
from models.assignment import Assignment, Submission, SubmissionStatus
from models.user import User, UserRole
from schemas.assignment import AssignmentCreate

logger = logging.getLogger(__name__)


def _submission_row(submission: Submission) -> dict:
    return {
        "id": submission.id,
        "assignment_id": submission.assignment_id,
        "user_id": submission.user_id,
        "github_link": submission.github_link,
        "status": submission.status,
        "feedback": submission.feedback,
        "submitted_at": submission.submitted_at,
        "graded_at": submission.graded_at,
        "graded_by": submission.graded_by,
        "full_name": submission.user.full_name if submission.user else None,
        "assignment_title": submission.assignment.title if submission.assignment else None,
    }


def get_assignment(db: Session, assignment_id: int) -> Assignment:
    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFound("Assignment not found.")
    return assignment


def create_assignment(db: Session, data: AssignmentCreate, admin: User) -> Assignment:
    assignment = Assignment(**data.model_dump(), created_by=admin.id)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info("Created assignment %s (%s)", assignment.id, assignment.title)
    history.record_for(db, admin, history.ASSIGNMENT_CREATED, f"Created assignment {assignment.id}")
    return assignment


def list_assignments(db: Session, user: User) -> List[Assignment]:
    query = db.query(Assignment)
    if not user.is_admin:
        # members without a department see nothing
        query = query.filter(Assignment.department == user.department)
    return query.order_by(Assignment.created_at.desc(), Assignment.id.desc()).all()


def assignment_stats(db: Session, assignment_id: int) -> dict:
    assignment = get_assignment(db, assignment_id)
    assigned = db.query(User).filter(
        User.role == UserRole.MEMBER,
        User.department == assignment.department,
        User.is_verified.is_(True),
    ).count()
    submitted = db.query(Submission).filter(Submission.assignment_id == assignment_id).count()
    return {"assignment_id": assignment_id, "assigned_count": assigned, "submission_count": submitted}


def list_submissions(db: Session, assignment_id: int) -> List[dict]:
    get_assignment(db, assignment_id)
    submissions = (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id)
        .order_by(Submission.submitted_at.desc())
        .all()
    )
    return [_submission_row(s) for s in submissions]


def submit(db: Session, assignment_id: int, github_link: str, user: User) -> dict:
    get_assignment(db, assignment_id)
    submission = Submission(assignment_id=assignment_id, user_id=user.id, github_link=github_link,
                            status=SubmissionStatus.PENDING)
    db.add(submission)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateError("You already submitted this assignment.")
    db.refresh(submission)
    history.record_for(db, user, history.ASSIGNMENT_SUBMITTED, f"Submission {submission.id}")
    return _submission_row(submission)


def my_submissions(db: Session, user: User) -> List[dict]:
    submissions = (
        db.query(Submission)
        .filter(Submission.user_id == user.id)
        .order_by(Submission.submitted_at.desc())
        .all()
    )
    return [_submission_row(s) for s in submissions]


def grade(db: Session, submission_id: int, status: str, feedback: str, admin: User) -> dict:
    submission = db.get(Submission, submission_id)
    if submission is None:
        raise NotFound("Submission not found.")

    submission.status = SubmissionStatus(status)
    submission.feedback = feedback or None
    submission.graded_at = datetime.now()
    submission.graded_by = admin.id
    db.commit()
    db.refresh(submission)
    logger.info("Submission %s graded %s by %s", submission_id, status, admin.username)
    history.record_for(db, admin, history.SUBMISSION_GRADED, f"Graded submission {submission_id}")
    return _submission_row(submission)
