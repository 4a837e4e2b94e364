from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database import get_db
from deps import get_current_user
from models.user import User as UserModel
from schemas.user import LoginResponse, RegisterResponse, User, UserLogin, UserRegister
from crud import users

router = APIRouter()

@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(data: UserRegister, db: Session = Depends(get_db)):
    user = users.register(db, data)
    return {"id": user.id, "message": "Registration successful."}

@router.post("/login", response_model=LoginResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    token, user = users.authenticate(db, credentials.email or credentials.username, credentials.password)
    return {"token": token, "user": user}

@router.get("/profile", response_model=User)
def profile(current_user: UserModel = Depends(get_current_user)):
    return current_user
