from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from deps import get_current_user, require_admin
from models.user import User
from schemas.project import Allocation, AllocationCreate
from crud import projects

router = APIRouter()

@router.get("/", response_model=List[Allocation])
def list_allocations(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return projects.list_allocations(db)

@router.post("/", response_model=Allocation, status_code=201)
def create_allocation(data: AllocationCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return projects.allocate(db, data.item_id, data.project_id, data.allocated_quantity, admin)

@router.delete("/{allocation_id}", status_code=204)
def delete_allocation(allocation_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    projects.deallocate(db, allocation_id, admin)
    return Response(status_code=204)
