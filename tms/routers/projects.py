from typing import List

from fastapi import APIRouter, HTTPException, Query

from tms.database import SessionLocal
from tms.models.project import Project
from tms.schemas.project import ProjectCreate, ProjectResponse

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(payload: ProjectCreate):
    db = SessionLocal()
    try:
        row = Project(
            name=payload.name,
            hourly_rate=payload.hourly_rate,
            is_active=True,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.get("", response_model=List[ProjectResponse])
def list_projects(
    active: bool = True,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
):
    db = SessionLocal()
    try:
        rows = (
            db.query(Project)
            .filter(Project.is_active == bool(active))
            .order_by(Project.name.asc(), Project.id.asc())
            .offset(int(offset))
            .limit(int(limit))
            .all()
        )
        return rows
    finally:
        db.close()


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str):
    db = SessionLocal()
    try:
        row = db.get(Project, str(project_id))
        if row is None:
            raise HTTPException(status_code=404, detail="Project not found")
        return row
    finally:
        db.close()
