import logging
from typing import Dict, Any, List

from cloudhub.database import models, utcnow
from cloudhub.repositories.interfaces import (
    IProjectRepository, IServiceRepository, IResourceUsageRepository, IActivityRepository
)
from cloudhub.schemas import ProjectCreate, ProjectUpdate
from cloudhub.utils.serializers import project_to_dict
from cloudhub.services.identity_service import CallerContext
from cloudhub.services.ownership import OwnershipGuard
from cloudhub.services.exceptions import ProjectNotFoundError

logger = logging.getLogger(__name__)


class ProjectService:
    """사용자 소유 프로젝트의 생성/조회/수정/삭제를 담당합니다."""

    def __init__(
        self,
        project_repo: IProjectRepository,
        service_repo: IServiceRepository,
        usage_repo: IResourceUsageRepository,
        activity_repo: IActivityRepository,
    ):
        """
        ProjectService를 초기화합니다.

        Args:
            project_repo: 프로젝트 데이터에 접근하기 위한 리포지토리.
            service_repo: 프로젝트 삭제 시 하위 서비스를 함께 지우기 위한 리포지토리.
            usage_repo: 하위 서비스의 사용률 샘플을 함께 지우기 위한 리포지토리.
            activity_repo: 변경 이력을 남기기 위한 리포지토리.
        """
        self.project_repo = project_repo
        self.service_repo = service_repo
        self.usage_repo = usage_repo
        self.activity_repo = activity_repo
        self.guard = OwnershipGuard(project_repo, service_repo)

    def list_projects(self, caller: CallerContext) -> List[Dict[str, Any]]:
        """요청자가 소유한 프로젝트 목록을 조회합니다."""
        return [project_to_dict(p) for p in self.project_repo.list_by_user_id(caller.user_id)]

    def get_project(self, caller: CallerContext, project_id: int) -> Dict[str, Any]:
        """
        ID로 특정 프로젝트를 조회합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            AccessDeniedError: 요청자가 프로젝트 소유자가 아닐 때.
        """
        return project_to_dict(self.guard.owned_project(caller, project_id))

    def create_project(self, caller: CallerContext, data: ProjectCreate) -> Dict[str, Any]:
        """
        새로운 프로젝트를 생성하고 'project_created' 활동을 기록합니다.
        프로젝트의 소유자는 항상 요청자입니다.
        """
        new_project = models.Project(
            name=data.name,
            status=data.status,
            cost_per_month=data.cost_per_month,
            user_id=caller.user_id,
        )
        if data.status == "production":
            new_project.last_deployed = utcnow()
        created = self.project_repo.create(new_project)

        self._record(caller, "project_created", f"{created.name} project created", created.id)
        logger.info("Project %s created by user %s", created.id, caller.user_id)
        return project_to_dict(created)

    def update_project(self, caller: CallerContext, project_id: int, data: ProjectUpdate) -> Dict[str, Any]:
        """
        프로젝트의 이름/상태/비용을 수정합니다.
        상태가 production으로 바뀌면 last_deployed를 갱신하고 'deployment' 활동을 기록합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            AccessDeniedError: 요청자가 프로젝트 소유자가 아닐 때.
        """
        project = self.guard.owned_project(caller, project_id)
        fields = data.model_dump(exclude_unset=True, exclude_none=True)

        promoted = fields.get("status") == "production" and project.status != "production"
        if promoted:
            fields["last_deployed"] = utcnow()

        updated = self.project_repo.update(project_id, fields)
        if not updated:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")

        if promoted:
            self._record(caller, "deployment", f"{updated.name} deployed to production", updated.id)
        return project_to_dict(updated)

    def delete_project(self, caller: CallerContext, project_id: int) -> bool:
        """
        프로젝트와 하위 서비스, 서비스의 사용률 샘플을 함께 삭제합니다.

        활동 기록은 감사 이력으로 남기되, 삭제된 프로젝트/서비스를 가리키는 ID는 비웁니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            AccessDeniedError: 요청자가 프로젝트 소유자가 아닐 때.
        """
        project = self.guard.owned_project(caller, project_id)

        for service in self.service_repo.list_by_project_id(project_id):
            self.usage_repo.delete_by_service_id(service.id)
            self.activity_repo.detach_service(service.id)
        removed_services = self.service_repo.delete_by_project_id(project_id)
        self.activity_repo.detach_project(project_id)

        project_name = project.name
        if not self.project_repo.delete(project_id):
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")

        self._record(caller, "project_deleted", f"{project_name} project deleted", None)
        logger.info("Project %s deleted with %s service(s)", project_id, removed_services)
        return True

    def _record(self, caller: CallerContext, activity_type: str, message: str, project_id):
        self.activity_repo.create(models.Activity(
            type=activity_type,
            message=message,
            user_id=caller.user_id,
            project_id=project_id,
        ))
