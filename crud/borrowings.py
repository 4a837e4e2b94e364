from typing import List, Optional
from sqlalchemy.orm import Session
from crud import history, ledger
from crud.errors import Forbidden, NotFound
from models.borrowing import Borrowing
from models.user import User
from schemas.borrowing import BorrowingCreate

def list_borrowings(db: Session, user: User, active: Optional[bool] = None) -> List[Borrowing]:
    query = db.query(Borrowing)
    if not user.is_admin:
        query = query.filter(Borrowing.user_id == user.id)
    if active is True:
        query = query.filter(Borrowing.returned_at.is_(None))
    elif active is False:
        query = query.filter(Borrowing.returned_at.isnot(None))
    return query.order_by(Borrowing.borrowed_at.desc(), Borrowing.id.desc()).all()

def create_borrowing(db: Session, data: BorrowingCreate, admin: User) -> Borrowing:
    """Lend an item directly, without going through a request."""
    user_id = data.user_id
    borrowing = ledger.issue_borrowing(
        db,
        data.item_id,
        user_id,
        data.quantity,
        expected_return_date=data.expected_return_date,
        notes=data.notes,
    )
    history.record_for(db, admin, history.BORROWING_CREATED,
                       f"Borrowing {borrowing.id}: {borrowing.quantity} x {borrowing.tool_name} to user {user_id}")
    return borrowing

def return_borrowing(db: Session, borrowing_id: int, user: User, notes: Optional[str] = None) -> Borrowing:
    borrowing = db.get(Borrowing, borrowing_id)
    if borrowing is None:
        raise NotFound("Borrowing not found")
    if borrowing.user_id != user.id and not user.is_admin:
        raise Forbidden("Only the borrower or an admin can return this borrowing")

    borrowing = ledger.return_borrowing(db, borrowing_id, notes)
    history.record_for(db, user, history.BORROWING_RETURNED,
                       f"Returned borrowing {borrowing_id} ({borrowing.quantity} x {borrowing.tool_name})")
    return borrowing
