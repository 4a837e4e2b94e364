from typing import List, Optional
from sqlalchemy.orm import Session
from crud import history, ledger
from models.inventory import Item, Transaction
from models.user import User
from schemas.inventory import ItemCreate, ItemUpdate

def get_items(db: Session, skip: int = 0, limit: int = 100, search: Optional[str] = None) -> List[Item]:
    query = db.query(Item)

    if search:
        query = query.filter(Item.name.ilike(f'%{search}%'))

    return query.order_by(Item.name.asc()).offset(skip).limit(limit).all()

def get_item(db: Session, item_id: int) -> Item:
    return ledger.get_item(db, item_id)

def create_item(db: Session, item: ItemCreate, admin: User) -> Item:
    db_item = ledger.create_item(db, item)
    history.record_for(db, admin, history.ITEM_CREATED, f"Created item {db_item.name} (quantity {db_item.quantity})")
    return db_item

def update_item(db: Session, item_id: int, item_update: ItemUpdate, admin: User) -> Item:
    db_item = ledger.update_item(db, item_id, item_update)
    history.record_for(db, admin, history.ITEM_UPDATED, f"Updated item {item_id}")
    return db_item

def delete_item(db: Session, item_id: int, admin: User) -> None:
    ledger.delete_item(db, item_id)
    history.record_for(db, admin, history.ITEM_DELETED, f"Deleted item {item_id}")

def issue_item(db: Session, item_id: int, quantity: int, admin: User) -> Transaction:
    transaction = ledger.issue_item(db, item_id, admin.id, quantity)
    history.record_for(db, admin, history.ITEM_ISSUED, f"Issued {quantity} of item {item_id}")
    return transaction

def return_item(db: Session, item_id: int, quantity: int, admin: User) -> Transaction:
    transaction = ledger.return_item(db, item_id, admin.id, quantity)
    history.record_for(db, admin, history.ITEM_RETURNED, f"Returned {quantity} of item {item_id}")
    return transaction

def get_transactions(db: Session, skip: int = 0, limit: int = 100) -> List[dict]:
    rows = (
        db.query(Transaction, Item.name, User.username)
        .join(Item, Transaction.item_id == Item.id)
        .join(User, Transaction.user_id == User.id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return [
        {
            "id": t.id,
            "item_id": t.item_id,
            "user_id": t.user_id,
            "type": t.type,
            "quantity": t.quantity,
            "date": t.date,
            "item_name": item_name,
            "username": username,
        }
        for t, item_name, username in rows
    ]
