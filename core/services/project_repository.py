# =============================================================================
# core/services/project_repository.py - Project Persistence
# =============================================================================
# Ordered project collection on top of ConfigStore.
#
# - list(): stable ascending sort by `order` (ties keep creation order)
# - create(): defaults applied, appended at the end of storage order
# - update(): partial merge, only the fields present in the input change
# - delete(): removes the project
#
# Inputs are validated before the write is queued; update/delete re-check
# existence inside the serialized cycle.
# =============================================================================

from __future__ import annotations

import logging

from app.exceptions import ProjectNotFoundError
from core.models.document import ConfigDocument
from core.models.project import Project, ProjectCreate, ProjectUpdate
from core.services.config_store import ConfigStore
from lib.utils import new_id

logger = logging.getLogger(__name__)


class ProjectRepository:
    """
    Repository for portfolio projects.

    Example:
        repo = ProjectRepository(store)
        project = await repo.create(ProjectCreate(title="CLI", description="A tool"))
        await repo.update(project.id, ProjectUpdate(order="2.9"))  # order -> 2
    """

    def __init__(self, store: ConfigStore):
        self.store = store

    async def list(self) -> list[Project]:
        """
        List all projects for display.

        Returns:
            Projects sorted ascending by order; sorted() is stable so equal
            orders keep their storage (creation) order
        """
        document = await self.store.load()
        return sorted(document.projects, key=lambda project: project.order)

    async def get(self, project_id: str) -> Project | None:
        """
        Get a project by ID.

        Returns:
            The project, or None if no project has that id
        """
        document = await self.store.load()
        index = document.find_project_index(project_id)
        return document.projects[index] if index is not None else None

    async def create(self, fields: ProjectCreate) -> Project:
        """
        Create a project.

        Raises:
            InvalidArgumentError: For an invalid order, tags, URL or image
        """
        project = fields.to_project(new_id())

        def apply(document: ConfigDocument) -> Project:
            document.projects.append(project)
            return project

        created = await self.store.mutate(apply)
        logger.info(f"Created project: {created.id}")
        return created

    async def update(self, project_id: str, fields: ProjectUpdate) -> Project:
        """
        Merge a partial update into a project.

        Raises:
            InvalidArgumentError: For an invalid field value
            ProjectNotFoundError: If no project has that id
        """
        changes = fields.changes()

        def apply(document: ConfigDocument) -> Project:
            index = document.find_project_index(project_id)
            if index is None:
                raise ProjectNotFoundError(project_id)
            updated = document.projects[index].model_copy(update=changes)
            document.projects[index] = updated
            return updated

        updated = await self.store.mutate(apply)
        logger.info(f"Updated project: {project_id} ({', '.join(sorted(changes)) or 'no changes'})")
        return updated

    async def delete(self, project_id: str) -> None:
        """
        Delete a project.

        Raises:
            ProjectNotFoundError: If no project has that id
        """

        def apply(document: ConfigDocument) -> None:
            index = document.find_project_index(project_id)
            if index is None:
                raise ProjectNotFoundError(project_id)
            del document.projects[index]

        await self.store.mutate(apply)
        logger.info(f"Deleted project: {project_id}")
