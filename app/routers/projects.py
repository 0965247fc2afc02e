# =============================================================================
# app/routers/projects.py - Project CRUD Endpoints
# =============================================================================
# Reads are public. Create/update/delete require an admin session and a
# CSRF token (see app.auth.require_admin_write).
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.auth import SessionRecord, require_admin_write
from app.dependencies import ProjectRepositoryDep
from app.exceptions import ProjectNotFoundError
from core.models.project import Project, ProjectCreate, ProjectUpdate

router = APIRouter()

ProjectId = Annotated[str, Path(description="Project id")]


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=list[Project])
async def list_projects(projects: ProjectRepositoryDep):
    """
    List all projects, sorted ascending by order.

    Projects with the same order keep their creation order.
    """
    return await projects.list()


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: ProjectId, projects: ProjectRepositoryDep):
    """
    Get a single project.

    Raises:
        404: If no project has this id
    """
    project = await projects.get(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


@router.post("", response_model=Project)
async def create_project(
    request: ProjectCreate,
    projects: ProjectRepositoryDep,
    session: SessionRecord = Depends(require_admin_write),
):
    """
    Create a project.

    tags may be a list or a comma-separated string; order defaults to 0
    and is floored to an integer.
    """
    return await projects.create(request)


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: ProjectId,
    request: ProjectUpdate,
    projects: ProjectRepositoryDep,
    session: SessionRecord = Depends(require_admin_write),
):
    """
    Update a project.

    Only the fields sent are changed. An empty order is ignored.
    """
    return await projects.update(project_id, request)


@router.delete("/{project_id}")
async def delete_project(
    project_id: ProjectId,
    projects: ProjectRepositoryDep,
    session: SessionRecord = Depends(require_admin_write),
):
    """
    Delete a project.

    Raises:
        404: If no project has this id
    """
    await projects.delete(project_id)
    return {"success": True}
