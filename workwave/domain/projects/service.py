"""Project service - Business logic for project operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Actor
from ...errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...models import Bid, ContractStage, Project, ProjectStatus
from ...utils.sanitization import sanitize_list, sanitize_string
from .repository import ProjectRepository
from .schemas import ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

# Statuses an owner may set by hand; IN_PROGRESS and COMPLETED follow the contract
OWNER_SETTABLE_STATUSES = {ProjectStatus.OPEN.value, ProjectStatus.CANCELLED.value}
ACTIVE_CONTRACT_STAGES = [ContractStage.PAYMENT.value, ContractStage.REVIEW.value]


class ProjectService:
    """Service layer for project business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProjectRepository()

    def get_project(self, project_id: int) -> Project:
        project = self.repo.get_by_id(self.db, project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    def visible_bids(self, project: Project, actor: Optional[Actor]) -> list[Bid]:
        """The owner sees every bid, a freelancer only their own, anyone else none"""
        if actor is None:
            return []
        if actor.id == project.client_id:
            return list(project.bids)
        return [bid for bid in project.bids if bid.freelancer_id == actor.id]

    def list_my_projects(self, actor: Actor) -> list[Project]:
        return self.repo.get_for_user(self.db, actor.id)

    def list_open_projects(self) -> list[Project]:
        return self.repo.get_open(self.db)

    def create_project(self, data: ProjectCreate, actor: Actor) -> Project:
        if not actor.is_client:
            raise ForbiddenError("Only clients can post projects")

        project = self.repo.create(
            self.db,
            client_id=actor.id,
            title=sanitize_string(data.title),
            description=sanitize_string(data.description),
            budget=data.budget,
            deadline=data.deadline,
            skills=sanitize_list(data.skills),
            category=sanitize_string(data.category),
            status=ProjectStatus.OPEN.value,
        )
        logger.info(f"📝 Project {project.id} posted by client {actor.id}")
        return project

    def update_project(self, project_id: int, data: ProjectUpdate, actor: Actor) -> Project:
        project = self.get_project(project_id)
        if project.client_id != actor.id:
            raise ForbiddenError("You can only update your own projects")

        updates = {}
        if data.title is not None:
            updates["title"] = sanitize_string(data.title)
        if data.description is not None:
            updates["description"] = sanitize_string(data.description)
        if data.budget is not None:
            updates["budget"] = data.budget
        if "deadline" in data.model_fields_set:
            updates["deadline"] = data.deadline
        if data.skills is not None:
            updates["skills"] = sanitize_list(data.skills)
        if data.category is not None:
            updates["category"] = sanitize_string(data.category)
        if data.status is not None:
            if data.status not in OWNER_SETTABLE_STATUSES:
                raise ValidationError(f"Project status cannot be set to {data.status}")
            updates["status"] = data.status

        return self.repo.update(self.db, project, **updates)

    def delete_project(self, project_id: int, actor: Actor) -> None:
        project = self.get_project(project_id)
        if project.client_id != actor.id:
            raise ForbiddenError("You can only delete your own projects")

        if self.repo.has_active_contract(self.db, project.id, ACTIVE_CONTRACT_STAGES):
            raise ConflictError("Cannot delete a project with active contracts")

        self.repo.delete_with_contracts(self.db, project)
        logger.info(f"🗑️ Project {project_id} deleted by client {actor.id}")
