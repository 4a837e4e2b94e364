from datetime import datetime, timedelta

import pytest

from conftest import make_item
from crud import ledger
from crud.errors import AlreadyReturned, InsufficientStock, InvalidState, NotFound, ValidationError
from models.borrowing import Borrowing
from models.inventory import Item, Transaction, TransactionType
from models.project import Allocation
from schemas.inventory import ItemCreate, ItemUpdate


def stock(db, item_id):
    item = db.get(Item, item_id)
    db.refresh(item)
    return item.quantity, item.available_quantity


def test_allocate_then_deallocate_restores_stock(db, item, project):
    allocation = ledger.allocate(db, item.id, project.id, 5)
    assert stock(db, item.id) == (20, 15)
    assert allocation.allocated_quantity == 5

    ledger.deallocate(db, allocation.id)
    assert stock(db, item.id) == (20, 20)
    assert db.get(Allocation, allocation.id) is None


@pytest.mark.parametrize("quantity", [0, -3])
def test_allocate_rejects_non_positive_quantity(db, item, project, quantity):
    with pytest.raises(ValidationError):
        ledger.allocate(db, item.id, project.id, quantity)
    assert stock(db, item.id) == (20, 20)


def test_allocate_more_than_available(db, project):
    item = make_item(db, "Soldering Iron", quantity=4)
    with pytest.raises(InsufficientStock) as exc:
        ledger.allocate(db, item.id, project.id, 5)
    assert exc.value.available == 4
    assert stock(db, item.id) == (4, 4)
    assert db.query(Allocation).count() == 0


def test_allocate_missing_item_or_project(db, item, project):
    with pytest.raises(NotFound):
        ledger.allocate(db, 999, project.id, 1)
    with pytest.raises(NotFound):
        ledger.allocate(db, item.id, 999, 1)


def test_deallocate_missing(db):
    with pytest.raises(NotFound):
        ledger.deallocate(db, 42)


def test_borrowing_issue_and_return(db, item, member):
    due = datetime.now() + timedelta(days=7)
    borrowing = ledger.issue_borrowing(db, item.id, member.id, 2, expected_return_date=due, notes="for lab 3")
    assert borrowing.returned_at is None
    assert borrowing.tool_name == "Oscilloscope"
    assert stock(db, item.id) == (20, 18)

    returned = ledger.return_borrowing(db, borrowing.id, notes="all good")
    assert returned.returned_at is not None
    assert returned.notes == "for lab 3\nall good"
    assert stock(db, item.id) == (20, 20)


def test_return_twice_is_rejected(db, item, member):
    borrowing = ledger.issue_borrowing(db, item.id, member.id, 1)
    ledger.return_borrowing(db, borrowing.id)
    with pytest.raises(AlreadyReturned):
        ledger.return_borrowing(db, borrowing.id)
    assert stock(db, item.id) == (20, 20)


def test_return_borrowing_without_item_leaves_stock_alone(db, item, member):
    borrowing = Borrowing(user_id=member.id, tool_name="Multimeter", quantity=1, borrowed_at=datetime.now())
    db.add(borrowing)
    db.commit()

    returned = ledger.return_borrowing(db, borrowing.id)
    assert returned.returned_at is not None
    assert stock(db, item.id) == (20, 20)


def test_issue_borrowing_insufficient_stock(db, member):
    item = make_item(db, "Logic Analyzer", quantity=1)
    with pytest.raises(InsufficientStock):
        ledger.issue_borrowing(db, item.id, member.id, 2)
    assert db.query(Borrowing).count() == 0
    assert stock(db, item.id) == (1, 1)


def test_issue_and_return_item_write_transactions(db, item, admin):
    issued = ledger.issue_item(db, item.id, admin.id, 3)
    assert issued.type == TransactionType.ISSUE
    assert stock(db, item.id) == (20, 17)

    back = ledger.return_item(db, item.id, admin.id, 3)
    assert back.type == TransactionType.RETURN
    assert stock(db, item.id) == (20, 20)
    assert db.query(Transaction).count() == 2


def test_return_item_cannot_exceed_total(db, item, admin):
    with pytest.raises(InvalidState):
        ledger.return_item(db, item.id, admin.id, 1)
    assert stock(db, item.id) == (20, 20)
    assert db.query(Transaction).count() == 0


def test_create_item_starts_fully_available(db):
    item = ledger.create_item(db, ItemCreate(name="Drill", quantity=6, cabinet="C2"))
    assert (item.quantity, item.available_quantity) == (6, 6)


def test_update_item_shifts_available_by_delta(db, item, project):
    ledger.allocate(db, item.id, project.id, 5)

    updated = ledger.update_item(db, item.id, ItemUpdate(quantity=25, cabinet="A1"))
    assert (updated.quantity, updated.available_quantity) == (25, 20)
    assert updated.cabinet == "A1"

    updated = ledger.update_item(db, item.id, ItemUpdate(quantity=5))
    assert (updated.quantity, updated.available_quantity) == (5, 0)


def test_update_item_cannot_shrink_below_claims(db, item, project):
    ledger.allocate(db, item.id, project.id, 5)
    with pytest.raises(InsufficientStock):
        ledger.update_item(db, item.id, ItemUpdate(quantity=4))
    assert stock(db, item.id) == (20, 15)


def test_update_item_rejects_null_name(db, item):
    with pytest.raises(ValidationError):
        ledger.update_item(db, item.id, ItemUpdate(name=None, quantity=25))
    assert stock(db, item.id) == (20, 20)


def test_delete_item_while_claimed(db, item, project):
    allocation = ledger.allocate(db, item.id, project.id, 1)
    with pytest.raises(InvalidState):
        ledger.delete_item(db, item.id)

    ledger.deallocate(db, allocation.id)
    ledger.delete_item(db, item.id)
    assert db.get(Item, item.id) is None


def test_available_stays_within_bounds_over_a_sequence(db, item, project, member):
    allocations = [ledger.allocate(db, item.id, project.id, q) for q in (4, 6)]
    borrowing = ledger.issue_borrowing(db, item.id, member.id, 7)
    with pytest.raises(InsufficientStock):
        ledger.issue_borrowing(db, item.id, member.id, 4)
    ledger.issue_item(db, item.id, member.id, 3)
    assert stock(db, item.id) == (20, 0)

    ledger.deallocate(db, allocations[0].id)
    ledger.return_borrowing(db, borrowing.id)
    ledger.return_item(db, item.id, member.id, 3)
    ledger.deallocate(db, allocations[1].id)
    with pytest.raises(InvalidState):
        ledger.return_item(db, item.id, member.id, 1)

    quantity, available = stock(db, item.id)
    assert 0 <= available <= quantity
    assert available == 20
