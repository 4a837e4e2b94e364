from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from deps import get_current_user, require_admin
from models.user import User
from schemas.inventory import Item, ItemCreate, ItemUpdate, StockMovement, Transaction
from crud import inventory

router = APIRouter()

@router.get("/", response_model=List[Item])
def list_items(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return inventory.get_items(db, skip, limit, search)

@router.post("/", response_model=Item, status_code=201)
def create_item(item: ItemCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return inventory.create_item(db, item, admin)

@router.post("/issue", response_model=Transaction)
def issue_item(movement: StockMovement, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return inventory.issue_item(db, movement.item_id, movement.quantity, admin)

@router.post("/return", response_model=Transaction)
def return_item(movement: StockMovement, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return inventory.return_item(db, movement.item_id, movement.quantity, admin)

@router.get("/transactions", response_model=List[Transaction])
def list_transactions(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return inventory.get_transactions(db, skip, limit)

@router.get("/{item_id}", response_model=Item)
def get_item(item_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return inventory.get_item(db, item_id)

@router.put("/{item_id}", response_model=Item)
def update_item(item_id: int, item_update: ItemUpdate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return inventory.update_item(db, item_id, item_update, admin)

@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    inventory.delete_item(db, item_id, admin)
    return Response(status_code=204)
