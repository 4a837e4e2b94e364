import pytest

from conftest import make_item
from crud import tool_requests
from crud.errors import Forbidden, InsufficientStock, InvalidState, NotFound
from models.borrowing import Borrowing, RequestStatus
from models.history import History
from models.inventory import Item


def available(db, item_id):
    item = db.get(Item, item_id)
    db.refresh(item)
    return item.available_quantity


def test_approve_issues_borrowing(db, admin, member):
    item = make_item(db, "Oscilloscope", quantity=3)
    request = tool_requests.create(db, member, "Scope for lab", "Oscilloscope", 1, "signals lab")
    assert request.status == RequestStatus.PENDING
    assert available(db, item.id) == 3

    approved, borrowing = tool_requests.approve(db, request.id, admin)
    assert approved.status == RequestStatus.APPROVED
    assert approved.resolved_by == admin.id
    assert approved.resolved_at is not None
    assert approved.item_id == item.id
    assert borrowing.quantity == 1
    assert borrowing.request_id == request.id
    assert borrowing.user_id == member.id
    assert available(db, item.id) == 2


def test_approve_matches_tool_name_case_insensitively(db, admin, member):
    item = make_item(db, "Oscilloscope", quantity=2)
    request = tool_requests.create(db, member, "Scope", "  oscilloscope ", 1)

    _, borrowing = tool_requests.approve(db, request.id, admin)
    assert borrowing.item_id == item.id


def test_approve_with_insufficient_stock_leaves_request_pending(db, admin, member):
    item = make_item(db, "Oscilloscope", quantity=2)
    request = tool_requests.create(db, member, "Scopes", "Oscilloscope", 3)

    with pytest.raises(InsufficientStock):
        tool_requests.approve(db, request.id, admin)

    db.refresh(request)
    assert request.status == RequestStatus.PENDING
    assert available(db, item.id) == 2
    assert db.query(Borrowing).count() == 0


def test_approve_unknown_tool(db, admin, member):
    request = tool_requests.create(db, member, "Laser", "Laser Cutter", 1)
    with pytest.raises(NotFound):
        tool_requests.approve(db, request.id, admin)
    db.refresh(request)
    assert request.status == RequestStatus.PENDING


def test_resolved_request_is_final(db, admin, member):
    make_item(db, "Oscilloscope", quantity=5)
    request = tool_requests.create(db, member, "Scope", "Oscilloscope", 1)
    tool_requests.approve(db, request.id, admin)

    with pytest.raises(InvalidState):
        tool_requests.approve(db, request.id, admin)
    with pytest.raises(InvalidState):
        tool_requests.reject(db, request.id, admin)
    with pytest.raises(InvalidState):
        tool_requests.cancel(db, request.id, member)
    assert db.query(Borrowing).count() == 1


def test_reject_records_reason(db, admin, member):
    request = tool_requests.create(db, member, "Scope", "Oscilloscope", 1)
    rejected = tool_requests.reject(db, request.id, admin, "Out for calibration")
    assert rejected.status == RequestStatus.REJECTED
    assert rejected.cancellation_reason == "Out for calibration"


def test_cancel_only_by_requester_or_admin(db, admin, member, other_member):
    request = tool_requests.create(db, member, "Scope", "Oscilloscope", 1)
    with pytest.raises(Forbidden):
        tool_requests.cancel(db, request.id, other_member)

    cancelled = tool_requests.cancel(db, request.id, member, "No longer needed")
    assert cancelled.status == RequestStatus.CANCELLED

    second = tool_requests.create(db, member, "Scope", "Oscilloscope", 1)
    assert tool_requests.cancel(db, second.id, admin).status == RequestStatus.CANCELLED


def test_list_requests_scoped_to_member(db, admin, member, other_member):
    tool_requests.create(db, member, "A", "Oscilloscope", 1)
    tool_requests.create(db, other_member, "B", "Drill", 1)

    assert [r.title for r in tool_requests.list_requests(db, member)] == ["A"]
    assert len(tool_requests.list_requests(db, admin)) == 2
    assert tool_requests.list_requests(db, admin, RequestStatus.APPROVED) == []


def test_transitions_are_audited(db, admin, member):
    make_item(db, "Oscilloscope", quantity=5)
    request = tool_requests.create(db, member, "Scope", "Oscilloscope", 1)
    tool_requests.approve(db, request.id, admin)

    actions = [h.action for h in db.query(History).order_by(History.id)]
    assert actions == ["REQUEST_SUBMITTED", "REQUEST_APPROVED", "BORROWING_CREATED"]
