import logging
from datetime import datetime
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud import history, ledger
from crud.errors import DuplicateError, NotFound, ValidationError
from models.inventory import Item
from models.project import Allocation, Project, ProjectStatus, ProjectVolunteer, VolunteerStatus
from models.user import User
from schemas.project import ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)


def _project_row(project: Project, volunteer_count: int) -> dict:
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "status": project.status,
        "lead_id": project.lead_id,
        "start_date": project.start_date,
        "end_date": project.end_date,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
        "lead_name": project.lead.full_name if project.lead else None,
        "lead_email": project.lead.email if project.lead else None,
        "volunteer_count": volunteer_count or 0,
    }


def get_project(db: Session, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


def list_projects(db: Session) -> List[dict]:
    accepted = (
        db.query(ProjectVolunteer.project_id, func.count(ProjectVolunteer.id).label("volunteer_count"))
        .filter(ProjectVolunteer.status == VolunteerStatus.ACCEPTED)
        .group_by(ProjectVolunteer.project_id)
        .subquery()
    )
    rows = (
        db.query(Project, accepted.c.volunteer_count)
        .outerjoin(accepted, accepted.c.project_id == Project.id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )
    return [_project_row(project, count) for project, count in rows]


def create_project(db: Session, data: ProjectCreate, admin: User) -> dict:
    if data.lead_id is not None and db.get(User, data.lead_id) is None:
        raise NotFound("Lead user not found")
    project = Project(**data.model_dump())
    project.status = ProjectStatus.PLANNING
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Created project %s (%s)", project.id, project.name)
    history.record_for(db, admin, history.CREATE_PROJECT, f"Created project: {project.name}")
    return _project_row(project, 0)


def update_project(db: Session, project_id: int, data: ProjectUpdate, admin: User) -> dict:
    update_data = data.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("No fields to update")
    for field in ("name", "status"):
        if field in update_data and update_data[field] is None:
            raise ValidationError(f"Project {field} cannot be null")
    project = get_project(db, project_id)
    if update_data.get("lead_id") is not None and db.get(User, update_data["lead_id"]) is None:
        raise NotFound("Lead user not found")

    for key, value in update_data.items():
        setattr(project, key, value)
    project.updated_at = datetime.now()
    db.commit()
    db.refresh(project)
    logger.info("Updated project %s: %s", project_id, ", ".join(update_data))
    history.record_for(db, admin, history.UPDATE_PROJECT, f"Updated project {project_id}")

    count = db.query(ProjectVolunteer).filter(
        ProjectVolunteer.project_id == project_id,
        ProjectVolunteer.status == VolunteerStatus.ACCEPTED,
    ).count()
    return _project_row(project, count)


def volunteer_row(volunteer) -> dict:
    user = volunteer.user
    return {
        "id": volunteer.id,
        "user_id": volunteer.user_id,
        "status": volunteer.status,
        "applied_at": volunteer.applied_at,
        "resolved_at": volunteer.resolved_at,
        "full_name": user.full_name if user else None,
        "email": user.email if user else None,
        "department": user.department.value if user and user.department else None,
    }


def list_volunteers(db: Session, project_id: int) -> List[dict]:
    get_project(db, project_id)
    volunteers = (
        db.query(ProjectVolunteer)
        .filter(ProjectVolunteer.project_id == project_id)
        .order_by(ProjectVolunteer.applied_at.desc())
        .all()
    )
    return [volunteer_row(v) for v in volunteers]


def apply(db: Session, project_id: int, user: User) -> ProjectVolunteer:
    project = get_project(db, project_id)
    volunteer = ProjectVolunteer(project_id=project.id, user_id=user.id, status=VolunteerStatus.PENDING)
    db.add(volunteer)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateError("You have already applied to this project")
    db.refresh(volunteer)
    history.record_for(db, user, history.VOLUNTEER_PROJECT, f"Applied to project {project.name}")
    return volunteer


def resolve_volunteer(db: Session, project_id: int, volunteer_id: int, status: str, admin: User) -> ProjectVolunteer:
    volunteer = db.query(ProjectVolunteer).filter(
        ProjectVolunteer.id == volunteer_id,
        ProjectVolunteer.project_id == project_id,
    ).first()
    if volunteer is None:
        raise NotFound("Volunteer application not found")

    volunteer.status = VolunteerStatus(status)
    volunteer.resolved_at = datetime.now()
    volunteer.resolved_by = admin.id
    db.commit()
    db.refresh(volunteer)
    logger.info("Volunteer %s of project %s marked %s", volunteer_id, project_id, status)
    history.record_for(db, admin, history.RESOLVE_VOLUNTEER,
                       f"Marked volunteer {volunteer_id} of project {project_id} as {status}")
    return volunteer


def list_allocations(db: Session) -> List[dict]:
    rows = (
        db.query(Allocation, Item.name, Project.name)
        .join(Item, Allocation.item_id == Item.id)
        .join(Project, Allocation.project_id == Project.id)
        .order_by(Allocation.id.desc())
        .all()
    )
    return [
        {
            "id": allocation.id,
            "item_id": allocation.item_id,
            "project_id": allocation.project_id,
            "allocated_quantity": allocation.allocated_quantity,
            "allocated_at": allocation.allocated_at,
            "item_name": item_name,
            "project_name": project_name,
        }
        for allocation, item_name, project_name in rows
    ]


def allocate(db: Session, item_id: int, project_id: int, quantity: int, admin: User) -> Allocation:
    allocation = ledger.allocate(db, item_id, project_id, quantity)
    history.record_for(db, admin, history.ALLOCATE_RESOURCE,
                       f"Allocated quantity {quantity} of Item {item_id} to Project {project_id}")
    return allocation


def deallocate(db: Session, allocation_id: int, admin: User) -> None:
    ledger.deallocate(db, allocation_id)
    history.record_for(db, admin, history.ALLOCATE_RESOURCE_REVOKE,
                       f"Revoked allocation {allocation_id} and restored stock")
