"""Tool request workflow: pending -> approved | rejected | cancelled.

Terminal states are final. Approval lends the stock through the ledger in the
same transaction as the status change.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from crud import history, ledger
from crud.errors import Forbidden, InvalidState, NotFound
from models.borrowing import Borrowing, Request, RequestStatus
from models.inventory import Item
from models.user import User

logger = logging.getLogger(__name__)


def get_request(db: Session, request_id: int) -> Request:
    request = db.get(Request, request_id)
    if request is None:
        raise NotFound("Request not found")
    return request


def _require_pending(request: Request) -> None:
    if request.status != RequestStatus.PENDING:
        raise InvalidState(f"Request is already {request.status.value}")


def _resolve_item(db: Session, request: Request) -> Item:
    if request.item_id is not None:
        item = db.get(Item, request.item_id)
    else:
        item = (
            db.query(Item)
            .filter(func.lower(Item.name) == request.tool_name.strip().lower())
            .order_by(Item.id)
            .first()
        )
    if item is None:
        raise NotFound(f"No inventory item matches '{request.tool_name}'")
    return item


def _transition(db: Session, request: Request, status: RequestStatus, actor: User, reason: Optional[str] = None) -> None:
    values = {"status": status, "resolved_at": datetime.now(), "resolved_by": actor.id}
    if reason is not None:
        values["cancellation_reason"] = reason
    result = db.execute(
        update(Request)
        .where(Request.id == request.id, Request.status == RequestStatus.PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidState("Request is no longer pending")


def create(
    db: Session,
    user: User,
    title: str,
    tool_name: str,
    quantity: int = 1,
    reason: Optional[str] = None,
    expected_return_date: Optional[datetime] = None,
    item_id: Optional[int] = None,
) -> Request:
    if item_id is not None and db.get(Item, item_id) is None:
        raise NotFound("Item not found")

    request = Request(
        user_id=user.id,
        title=title,
        tool_name=tool_name,
        item_id=item_id,
        quantity=quantity,
        reason=reason,
        expected_return_date=expected_return_date,
        status=RequestStatus.PENDING,
        requested_at=datetime.now(),
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    history.record_for(db, user, history.REQUEST_SUBMITTED, f"Requested {quantity} x {tool_name} (request {request.id})")
    return request


def approve(db: Session, request_id: int, admin: User) -> Tuple[Request, Borrowing]:
    request = get_request(db, request_id)
    _require_pending(request)
    item = _resolve_item(db, request)

    try:
        borrowing = ledger.issue_borrowing(
            db,
            item.id,
            request.user_id,
            request.quantity,
            expected_return_date=request.expected_return_date,
            request_id=request.id,
            commit=False,
        )
        _transition(db, request, RequestStatus.APPROVED, admin)
        if request.item_id is None:
            request.item_id = item.id
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    db.refresh(borrowing)
    logger.info("Request %s approved by %s, borrowing %s", request.id, admin.username, borrowing.id)

    history.record_for(db, admin, history.REQUEST_APPROVED,
                       f"Approved request {request.id} for {request.quantity} x {item.name}")
    history.record_for(db, admin, history.BORROWING_CREATED,
                       f"Borrowing {borrowing.id} issued to user {request.user_id}")
    return request, borrowing


def reject(db: Session, request_id: int, admin: User, reason: Optional[str] = None) -> Request:
    request = get_request(db, request_id)
    _require_pending(request)

    try:
        _transition(db, request, RequestStatus.REJECTED, admin, reason)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    history.record_for(db, admin, history.REQUEST_REJECTED, f"Rejected request {request.id}")
    return request


def cancel(db: Session, request_id: int, user: User, reason: Optional[str] = None) -> Request:
    request = get_request(db, request_id)
    if request.user_id != user.id and not user.is_admin:
        raise Forbidden("Only the requester can cancel this request")
    _require_pending(request)

    try:
        _transition(db, request, RequestStatus.CANCELLED, user, reason)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    history.record_for(db, user, history.REQUEST_CANCELLED, f"Cancelled request {request.id}")
    return request


def list_requests(db: Session, user: User, status: Optional[RequestStatus] = None):
    query = db.query(Request)
    if not user.is_admin:
        query = query.filter(Request.user_id == user.id)
    if status is not None:
        query = query.filter(Request.status == status)
    return query.order_by(Request.requested_at.desc(), Request.id.desc()).all()
