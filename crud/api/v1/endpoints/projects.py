from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from deps import get_current_user, require_admin
from models.user import User
from schemas.project import Project, ProjectCreate, ProjectUpdate, Volunteer, VolunteerResolve
from crud import projects

router = APIRouter()

@router.get("/", response_model=List[Project])
def list_projects(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return projects.list_projects(db)

@router.post("/", response_model=Project, status_code=201)
def create_project(data: ProjectCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return projects.create_project(db, data, admin)

@router.put("/{project_id}", response_model=Project)
def update_project(project_id: int, data: ProjectUpdate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return projects.update_project(db, project_id, data, admin)

@router.get("/{project_id}/volunteers", response_model=List[Volunteer])
def list_volunteers(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return projects.list_volunteers(db, project_id)

@router.post("/{project_id}/volunteer", status_code=201)
def volunteer(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    application = projects.apply(db, project_id, current_user)
    return {"id": application.id, "message": "Application submitted"}

@router.put("/{project_id}/volunteers/{volunteer_id}")
def resolve_volunteer(
    project_id: int,
    volunteer_id: int,
    data: VolunteerResolve,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    projects.resolve_volunteer(db, project_id, volunteer_id, data.status, admin)
    return {"message": f"Volunteer {data.status}"}
