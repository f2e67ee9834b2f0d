"""
Project API routes.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from issuetrack.api.deps import get_db
from issuetrack.api.schemas import ProjectResponse, ProjectUpdate, SuccessResponse
from issuetrack.core.db import Database
from issuetrack.core.errors import NotFoundError
from issuetrack.core.models import Project

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/projects", response_model=List[ProjectResponse])
def list_projects(db: Database = Depends(get_db)):
    """List projects with their issue counts."""
    return db.projects.list()


@router.post("/projects", response_model=ProjectResponse, status_code=201)
def create_project(payload: Project, db: Database = Depends(get_db)):
    project = db.projects.create(payload)
    logger.info("Created project %s", project["id"])
    return project


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, db: Database = Depends(get_db)):
    project = db.projects.get(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
def update_project(project_id: str, payload: ProjectUpdate, db: Database = Depends(get_db)):
    """Partially update a project; omitted fields are left unchanged."""
    if db.projects.get(project_id) is None:
        raise NotFoundError("Project not found")
    return db.projects.update(project_id, payload.model_dump(exclude_unset=True))


@router.delete("/projects/{project_id}", response_model=SuccessResponse)
def delete_project(project_id: str, db: Database = Depends(get_db)):
    """Delete a project; its issues stay, without a project."""
    if not db.projects.delete(project_id):
        raise NotFoundError("Project not found")
    logger.info("Deleted project %s", project_id)
    return {"success": True}
