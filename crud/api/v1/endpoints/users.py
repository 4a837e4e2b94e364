from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from deps import require_admin
from models.user import User as UserModel
from schemas.user import BulkRegister, BulkRegisterResult, RoleUpdate, User, UserSummary
from crud import users

router = APIRouter()

@router.get("/", response_model=List[UserSummary])
def list_users(db: Session = Depends(get_db), admin: UserModel = Depends(require_admin)):
    return users.list_users(db)

@router.get("/all", response_model=List[User])
def list_users_full(db: Session = Depends(get_db), admin: UserModel = Depends(require_admin)):
    return users.list_users_full(db)

@router.put("/{user_id}/role")
def update_role(user_id: int, data: RoleUpdate, db: Session = Depends(get_db), admin: UserModel = Depends(require_admin)):
    users.update_role(db, user_id, data.role, admin)
    return {"message": "Role updated."}

@router.post("/bulk-register", response_model=BulkRegisterResult)
def bulk_register(data: BulkRegister, db: Session = Depends(get_db), admin: UserModel = Depends(require_admin)):
    return users.bulk_register(db, data.users, admin)
