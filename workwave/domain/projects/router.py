"""Project router - FastAPI endpoints for projects"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor, get_optional_actor
from ...database import get_db
from .schemas import (
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectUpdate,
    project_detail_response,
    project_response,
)
from .service import ProjectService

router = APIRouter(prefix="/projects", tags=["Projects"])


def get_project_service(db: Session = Depends(get_db)) -> ProjectService:
    """Dependency injection for ProjectService"""
    return ProjectService(db)


@router.get("", response_model=list[ProjectResponse])
async def list_my_projects(
    actor: Actor = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    """Projects the caller owns or has bid on"""
    return [project_response(p) for p in service.list_my_projects(actor)]


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    actor: Actor = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return project_response(service.create_project(data, actor))


@router.get("/open", response_model=list[ProjectResponse])
async def list_open_projects(service: ProjectService = Depends(get_project_service)):
    """Public listing of projects accepting bids"""
    return [project_response(p) for p in service.list_open_projects()]


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: int,
    actor: Optional[Actor] = Depends(get_optional_actor),
    service: ProjectService = Depends(get_project_service),
):
    """Public project page; bids are listed for the owner and for bidders"""
    project = service.get_project(project_id)
    return project_detail_response(project, service.visible_bids(project, actor))


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    actor: Actor = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return project_response(service.update_project(project_id, data, actor))


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    service.delete_project(project_id, actor)
    return {"message": "Project deleted successfully"}
