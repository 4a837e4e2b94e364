import logging
from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud import history
from crud.errors import DuplicateError, NotFound
from crud.projects import volunteer_row
from models.competition import Competition, CompetitionItem, CompetitionVolunteer
from models.inventory import Item
from models.project import Project, ProjectVolunteer, VolunteerStatus
from models.user import User
from schemas.competition import CompetitionCreate

logger = logging.getLogger(__name__)


def get_competition(db: Session, competition_id: int) -> Competition:
    competition = db.get(Competition, competition_id)
    if competition is None:
        raise NotFound("Competition not found")
    return competition


def list_competitions(db: Session) -> List[Competition]:
    return db.query(Competition).order_by(Competition.start_date.desc(), Competition.id.desc()).all()


def calendar(db: Session) -> List[Competition]:
    return db.query(Competition).order_by(Competition.start_date.asc(), Competition.id.asc()).all()


def create_competition(db: Session, data: CompetitionCreate, admin: User) -> Competition:
    competition = Competition(**data.model_dump())
    db.add(competition)
    db.commit()
    db.refresh(competition)
    logger.info("Created competition %s (%s)", competition.id, competition.name)
    history.record_for(db, admin, history.COMPETITION_CREATED, f"Created competition: {competition.name}")
    return competition


def list_items(db: Session, competition_id: int) -> List[dict]:
    get_competition(db, competition_id)
    rows = (
        db.query(CompetitionItem, Item.name)
        .join(Item, CompetitionItem.item_id == Item.id)
        .filter(CompetitionItem.competition_id == competition_id)
        .order_by(CompetitionItem.id)
        .all()
    )
    return [
        {
            "id": entry.id,
            "competition_id": entry.competition_id,
            "item_id": entry.item_id,
            "quantity": entry.quantity,
            "item_name": item_name,
        }
        for entry, item_name in rows
    ]


def add_item(db: Session, competition_id: int, item_id: int, quantity: int, admin: User) -> dict:
    """Put an item on a competition's packing list. Stock levels are not touched."""
    competition = get_competition(db, competition_id)
    item = db.get(Item, item_id)
    if item is None:
        raise NotFound("Item not found")

    entry = CompetitionItem(competition_id=competition.id, item_id=item.id, quantity=quantity)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("Competition %s packing list: %s x item %s", competition.id, quantity, item.id)
    history.record_for(db, admin, history.ADD_COMPETITION_RESOURCE,
                       f"Added {quantity} x {item.name} to competition {competition.name}")
    return {
        "id": entry.id,
        "competition_id": entry.competition_id,
        "item_id": entry.item_id,
        "quantity": entry.quantity,
        "item_name": item.name,
    }


def list_volunteers(db: Session, competition_id: int) -> List[dict]:
    get_competition(db, competition_id)
    volunteers = (
        db.query(CompetitionVolunteer)
        .filter(CompetitionVolunteer.competition_id == competition_id)
        .order_by(CompetitionVolunteer.applied_at.desc())
        .all()
    )
    return [volunteer_row(v) for v in volunteers]


def apply(db: Session, competition_id: int, user: User) -> CompetitionVolunteer:
    competition = get_competition(db, competition_id)
    volunteer = CompetitionVolunteer(competition_id=competition.id, user_id=user.id, status=VolunteerStatus.PENDING)
    db.add(volunteer)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateError("You have already applied for this competition")
    db.refresh(volunteer)
    history.record_for(db, user, history.VOLUNTEER_COMPETITION, f"Applied to volunteer for competition {competition_id}")
    return volunteer


def resolve_volunteer(db: Session, competition_id: int, volunteer_id: int, status: str, admin: User) -> CompetitionVolunteer:
    volunteer = db.query(CompetitionVolunteer).filter(
        CompetitionVolunteer.id == volunteer_id,
        CompetitionVolunteer.competition_id == competition_id,
    ).first()
    if volunteer is None:
        raise NotFound("Volunteer application not found")

    volunteer.status = VolunteerStatus(status)
    volunteer.resolved_at = datetime.now()
    volunteer.resolved_by = admin.id
    db.commit()
    db.refresh(volunteer)
    logger.info("Volunteer %s of competition %s marked %s", volunteer_id, competition_id, status)
    history.record_for(db, admin, history.RESOLVE_COMPETITION_VOLUNTEER,
                       f"{status} competition volunteer {volunteer_id}")
    return volunteer


def my_applications(db: Session, user: User) -> dict:
    project_apps = (
        db.query(ProjectVolunteer, Project)
        .join(Project, ProjectVolunteer.project_id == Project.id)
        .filter(ProjectVolunteer.user_id == user.id)
        .all()
    )
    competition_apps = (
        db.query(CompetitionVolunteer, Competition)
        .join(Competition, CompetitionVolunteer.competition_id == Competition.id)
        .filter(CompetitionVolunteer.user_id == user.id)
        .all()
    )
    return {
        "projects": [
            {
                "id": app.id,
                "project_id": project.id,
                "project_name": project.name,
                "project_description": project.description,
                "status": app.status.value,
                "applied_at": app.applied_at,
                "type": "project",
            }
            for app, project in project_apps
        ],
        "competitions": [
            {
                "id": app.id,
                "competition_id": competition.id,
                "competition_name": competition.name,
                "competition_description": competition.description,
                "status": app.status.value,
                "applied_at": app.applied_at,
                "type": "competition",
            }
            for app, competition in competition_apps
        ],
    }
