from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from deps import get_current_user, require_admin
from models.user import User
from schemas.competition import Competition, CompetitionCreate, CompetitionItem, CompetitionItemCreate
from schemas.project import Volunteer, VolunteerResolve
from crud import competitions

router = APIRouter()

@router.get("/", response_model=List[Competition])
def list_competitions(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return competitions.list_competitions(db)

@router.post("/", response_model=Competition, status_code=201)
def create_competition(data: CompetitionCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return competitions.create_competition(db, data, admin)

@router.get("/calendar", response_model=List[Competition])
def competition_calendar(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return competitions.calendar(db)

@router.get("/my-applications")
def my_applications(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return competitions.my_applications(db, current_user)

@router.get("/{competition_id}/items", response_model=List[CompetitionItem])
def list_competition_items(competition_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return competitions.list_items(db, competition_id)

@router.post("/{competition_id}/items", response_model=CompetitionItem, status_code=201)
def add_competition_item(
    competition_id: int,
    data: CompetitionItemCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return competitions.add_item(db, competition_id, data.item_id, data.quantity, admin)

@router.get("/{competition_id}/volunteers", response_model=List[Volunteer])
def list_volunteers(competition_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return competitions.list_volunteers(db, competition_id)

@router.post("/{competition_id}/volunteer", status_code=201)
def volunteer(competition_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    application = competitions.apply(db, competition_id, current_user)
    return {"id": application.id, "message": "Application submitted"}

@router.put("/{competition_id}/volunteers/{volunteer_id}")
def resolve_volunteer(
    competition_id: int,
    volunteer_id: int,
    data: VolunteerResolve,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    competitions.resolve_volunteer(db, competition_id, volunteer_id, data.status, admin)
    return {"message": f"Volunteer {data.status}"}
