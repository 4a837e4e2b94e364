"""Stock ledger for lab items.

This module is the only writer of ``items.available_quantity``. Every
decrement is a single conditional UPDATE that succeeds only while enough stock
is on hand, and every restore is bounded by the item's total ``quantity``, so
``0 <= available_quantity <= quantity`` holds no matter how requests
interleave. Each public operation is one database transaction: it either
commits completely or rolls back and raises.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from crud.errors import InsufficientStock, InvalidState, NotFound, ValidationError, AlreadyReturned
from models.borrowing import Borrowing
from models.competition import CompetitionItem
from models.inventory import Item, Transaction, TransactionType
from models.project import Allocation, Project
from models.user import User
from schemas.inventory import ItemCreate, ItemUpdate

logger = logging.getLogger(__name__)


def _check_quantity(quantity) -> None:
    if quantity is None or isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer")


def get_item(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if item is None:
        raise NotFound("Item not found")
    return item


def _available(db: Session, item_id: int) -> int:
    return db.query(Item.available_quantity).filter(Item.id == item_id).scalar() or 0


def _take(db: Session, item: Item, quantity: int) -> None:
    result = db.execute(
        update(Item)
        .where(Item.id == item.id, Item.available_quantity >= quantity)
        .values(available_quantity=Item.available_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        available = _available(db, item.id)
        logger.warning(
            "Rejected stock request for item %s: requested %s, available %s",
            item.id, quantity, available,
        )
        raise InsufficientStock(item.id, quantity, available)
    db.expire(item, ["available_quantity"])


def _restore(db: Session, item_id: int, quantity: int) -> None:
    result = db.execute(
        update(Item)
        .where(Item.id == item_id, Item.available_quantity + quantity <= Item.quantity)
        .values(available_quantity=Item.available_quantity + quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning("Rejected restore of %s units to item %s", quantity, item_id)
        raise InvalidState("Returned quantity would exceed the item's total quantity")
    item = db.get(Item, item_id)
    if item is not None:
        db.expire(item, ["available_quantity"])


def allocate(db: Session, item_id: int, project_id: int, quantity: int) -> Allocation:
    _check_quantity(quantity)
    item = get_item(db, item_id)
    if db.get(Project, project_id) is None:
        raise NotFound("Project not found")

    try:
        _take(db, item, quantity)
        allocation = Allocation(item_id=item.id, project_id=project_id, allocated_quantity=quantity)
        db.add(allocation)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(allocation)
    logger.info("Allocated %s x item %s to project %s", quantity, item_id, project_id)
    return allocation


def deallocate(db: Session, allocation_id: int) -> None:
    allocation = db.get(Allocation, allocation_id)
    if allocation is None:
        raise NotFound("Allocation not found")

    item_id, quantity = allocation.item_id, allocation.allocated_quantity
    try:
        _restore(db, item_id, quantity)
        db.delete(allocation)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Released allocation %s (%s x item %s)", allocation_id, quantity, item_id)


def issue_borrowing(
    db: Session,
    item_id: int,
    user_id: int,
    quantity: int,
    expected_return_date: Optional[datetime] = None,
    request_id: Optional[int] = None,
    notes: Optional[str] = None,
    commit: bool = True,
) -> Borrowing:
    """Lend ``quantity`` units of an item to a user.

    With ``commit=False`` the caller owns the transaction: nothing is
    committed or rolled back here, which lets request approval apply its own
    status change atomically with the stock decrement.
    """
    _check_quantity(quantity)
    item = get_item(db, item_id)
    if db.get(User, user_id) is None:
        raise NotFound("User not found")

    try:
        _take(db, item, quantity)
        borrowing = Borrowing(
            user_id=user_id,
            request_id=request_id,
            item_id=item.id,
            tool_name=item.name,
            quantity=quantity,
            borrowed_at=datetime.now(),
            expected_return_date=expected_return_date,
            notes=notes,
        )
        db.add(borrowing)
        db.flush()
        if commit:
            db.commit()
    except Exception:
        if commit:
            db.rollback()
        raise

    if commit:
        db.refresh(borrowing)
    logger.info("Issued borrowing %s: %s x item %s to user %s", borrowing.id, quantity, item_id, user_id)
    return borrowing


def return_borrowing(db: Session, borrowing_id: int, notes: Optional[str] = None) -> Borrowing:
    borrowing = db.get(Borrowing, borrowing_id)
    if borrowing is None:
        raise NotFound("Borrowing not found")
    if borrowing.returned_at is not None:
        raise AlreadyReturned("Borrowing has already been returned")

    merged_notes = borrowing.notes
    if notes:
        merged_notes = f"{merged_notes}\n{notes}" if merged_notes else notes

    try:
        result = db.execute(
            update(Borrowing)
            .where(Borrowing.id == borrowing_id, Borrowing.returned_at.is_(None))
            .values(returned_at=datetime.now(), notes=merged_notes)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise AlreadyReturned("Borrowing has already been returned")
        if borrowing.item_id is not None:
            _restore(db, borrowing.item_id, borrowing.quantity)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(borrowing)
    logger.info("Borrowing %s returned", borrowing_id)
    return borrowing


def issue_item(db: Session, item_id: int, user_id: int, quantity: int) -> Transaction:
    _check_quantity(quantity)
    item = get_item(db, item_id)

    try:
        _take(db, item, quantity)
        transaction = Transaction(item_id=item.id, user_id=user_id, type=TransactionType.ISSUE,
                                  quantity=quantity, date=datetime.now())
        db.add(transaction)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(transaction)
    logger.info("Issued %s x item %s to user %s", quantity, item_id, user_id)
    return transaction


def return_item(db: Session, item_id: int, user_id: int, quantity: int) -> Transaction:
    _check_quantity(quantity)
    item = get_item(db, item_id)

    try:
        _restore(db, item.id, quantity)
        transaction = Transaction(item_id=item.id, user_id=user_id, type=TransactionType.RETURN,
                                  quantity=quantity, date=datetime.now())
        db.add(transaction)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(transaction)
    logger.info("Returned %s x item %s from user %s", quantity, item_id, user_id)
    return transaction


def create_item(db: Session, data: ItemCreate) -> Item:
    item = Item(**data.model_dump(), available_quantity=data.quantity)
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info("Created item %s (%s) with quantity %s", item.id, item.name, item.quantity)
    return item


def update_item(db: Session, item_id: int, data: ItemUpdate) -> Item:
    """Apply a partial update; a change of ``quantity`` shifts the on-hand count by the same delta."""
    item = get_item(db, item_id)
    values = data.model_dump(exclude_unset=True)
    if "name" in values and values["name"] is None:
        raise ValidationError("Item name cannot be null")
    new_quantity = values.pop("quantity", None)

    statement = update(Item).where(Item.id == item.id)
    if new_quantity is not None and new_quantity != item.quantity:
        delta = new_quantity - item.quantity
        statement = statement.where(Item.available_quantity + delta >= 0)
        values["quantity"] = new_quantity
        values["available_quantity"] = Item.available_quantity + delta
    if not values:
        return item

    try:
        result = db.execute(statement.values(**values).execution_options(synchronize_session=False))
        if result.rowcount != 1:
            claimed = item.quantity - _available(db, item.id)
            raise InsufficientStock(
                item.id, claimed, new_quantity,
                detail=f"Cannot reduce quantity to {new_quantity}: {claimed} units are allocated or on loan",
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(item)
    logger.info("Updated item %s", item_id)
    return item


def delete_item(db: Session, item_id: int) -> None:
    item = get_item(db, item_id)
    if item.available_quantity != item.quantity:
        raise InvalidState("Item cannot be deleted while units are allocated or on loan")

    referenced = (
        db.query(Allocation.id).filter(Allocation.item_id == item_id).first()
        or db.query(Borrowing.id).filter(Borrowing.item_id == item_id).first()
        or db.query(Transaction.id).filter(Transaction.item_id == item_id).first()
        or db.query(CompetitionItem.id).filter(CompetitionItem.item_id == item_id).first()
    )
    if referenced:
        raise InvalidState("Item is referenced by allocations, borrowings, transactions or competitions")

    try:
        db.delete(item)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted item %s", item_id)
