import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crud.errors import ValidationError
from models.history import History
from models.user import User

logger = logging.getLogger(__name__)

REGISTER = "REGISTER"
UPDATE_ROLE = "UPDATE_ROLE"
BULK_REGISTER = "BULK_REGISTER"
ITEM_CREATED = "ITEM_CREATED"
ITEM_UPDATED = "ITEM_UPDATED"
ITEM_DELETED = "ITEM_DELETED"
ITEM_ISSUED = "ITEM_ISSUED"
ITEM_RETURNED = "ITEM_RETURNED"
REQUEST_SUBMITTED = "REQUEST_SUBMITTED"
REQUEST_APPROVED = "REQUEST_APPROVED"
REQUEST_REJECTED = "REQUEST_REJECTED"
REQUEST_CANCELLED = "REQUEST_CANCELLED"
BORROWING_CREATED = "BORROWING_CREATED"
BORROWING_RETURNED = "BORROWING_RETURNED"
ALLOCATE_RESOURCE = "ALLOCATE_RESOURCE"
ALLOCATE_RESOURCE_REVOKE = "ALLOCATE_RESOURCE_REVOKE"
CREATE_PROJECT = "CREATE_PROJECT"
UPDATE_PROJECT = "UPDATE_PROJECT"
VOLUNTEER_PROJECT = "VOLUNTEER_PROJECT"
RESOLVE_VOLUNTEER = "RESOLVE_VOLUNTEER"
COMPETITION_CREATED = "COMPETITION_CREATED"
ADD_COMPETITION_RESOURCE = "ADD_COMPETITION_RESOURCE"
VOLUNTEER_COMPETITION = "VOLUNTEER_COMPETITION"
RESOLVE_COMPETITION_VOLUNTEER = "RESOLVE_COMPETITION_VOLUNTEER"
ASSIGNMENT_CREATED = "ASSIGNMENT_CREATED"
ASSIGNMENT_SUBMITTED = "ASSIGNMENT_SUBMITTED"
SUBMISSION_GRADED = "SUBMISSION_GRADED"

MAX_PAGE_SIZE = 1000


def record(db: Session, user_id: Optional[int], username: Optional[str], action: str, details: str = None) -> Optional[History]:
    """Append an audit entry.

    Runs after the operation it describes has committed, so a failure here
    only loses the audit row; it is logged and never raised to the caller.
    """
    entry = History(user_id=user_id, username=username, action=action, details=details)
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to record history action %s for user %s", action, user_id)
        return None
    return entry


def record_for(db: Session, user: User, action: str, details: str = None) -> Optional[History]:
    return record(db, user.id, user.username, action, details)


def list_history(
    db: Session,
    viewer: User,
    action: Optional[str] = None,
    user_id: Optional[int] = None,
    limit: int = 100,
    offset: int = 0,
) -> dict:
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    if offset < 0:
        raise ValidationError("offset must not be negative")

    query = db.query(History)
    if not viewer.is_admin:
        query = query.filter(History.user_id == viewer.id)
    elif user_id is not None:
        query = query.filter(History.user_id == user_id)
    if action:
        query = query.filter(History.action == action)

    total = query.count()
    records = query.order_by(History.timestamp.desc(), History.id.desc()).offset(offset).limit(limit).all()
    return {"records": records, "total": total, "limit": limit, "offset": offset}
