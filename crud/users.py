import logging
import re
import secrets
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud import history
from crud.errors import DuplicateError, NotFound, ValidationError
from models.user import User, UserRole
from schemas.user import BulkUser, UserRegister
from security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Username, email, or roll number already exists."
INVALID_CREDENTIALS = "Invalid credentials."


def _insert(db: Session, user: User) -> User:
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateError(DUPLICATE_MESSAGE)
    db.refresh(user)
    return user


def register(db: Session, data: UserRegister) -> User:
    user = _insert(db, User(
        username=data.username.strip(),
        password_hash=hash_password(data.password),
        role=UserRole.MEMBER,
        full_name=data.full_name.strip(),
        roll_number=data.roll_number or None,
        gender=data.gender,
        phone=data.phone or None,
        email=data.email.lower(),
        department=data.department,
        branch=data.branch or None,
        is_verified=True,
    ))
    logger.info("Registered member %s", user.username)
    history.record(db, user.id, user.username, history.REGISTER, "New member registration")
    return user


def authenticate(db: Session, identifier: Optional[str], password: str) -> Tuple[str, User]:
    """Log in by username or email, case-insensitively."""
    identifier = (identifier or "").strip().lower()
    if not identifier:
        raise ValidationError("Email or username is required.")

    user = db.query(User).filter(
        or_(func.lower(User.email) == identifier, func.lower(User.username) == identifier)
    ).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", identifier)
        raise ValidationError(INVALID_CREDENTIALS)

    return create_access_token(user), user


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.username.asc()).all()


def list_users_full(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def update_role(db: Session, user_id: int, role: UserRole, admin: User) -> User:
    user = get_user(db, user_id)
    user.role = role
    db.commit()
    db.refresh(user)
    history.record_for(db, admin, history.UPDATE_ROLE, f"Changed role for user {user_id} to {role.value}")
    return user


def _username_from_email(email: str) -> str:
    return re.sub(r"[^a-z0-9]", "", email.split("@")[0].lower())


def bulk_register(db: Session, users: List[BulkUser], admin: User) -> dict:
    results = {"success": [], "failed": []}

    for data in users:
        password = data.password or data.roll_number or secrets.token_urlsafe(6)
        username = _username_from_email(data.email)
        if len(username) < 3:
            results["failed"].append({"email": data.email, "error": "Cannot derive a username from email"})
            continue
        try:
            _insert(db, User(
                username=username,
                password_hash=hash_password(password),
                role=UserRole.MEMBER,
                full_name=data.full_name,
                roll_number=data.roll_number or None,
                gender=data.gender,
                phone=data.phone or None,
                email=data.email.lower(),
                department=data.department,
                branch=data.branch or None,
                is_verified=True,
            ))
        except DuplicateError as e:
            results["failed"].append({"email": data.email, "error": e.detail})
            continue

        entry = {"email": data.email, "full_name": data.full_name, "username": username}
        if not data.password:
            entry["generated_password"] = password
        results["success"].append(entry)

    logger.info("Bulk registration: %s created, %s failed", len(results["success"]), len(results["failed"]))
    history.record_for(db, admin, history.BULK_REGISTER,
                       f"Registered {len(results['success'])} users, {len(results['failed'])} failed")
    return results
