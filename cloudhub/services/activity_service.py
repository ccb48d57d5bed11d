from typing import Dict, Any, List

from cloudhub.database import models
from cloudhub.repositories.interfaces import (
    IActivityRepository, IProjectRepository, IServiceRepository, IUserRepository
)
from cloudhub.schemas import ActivityCreate
from cloudhub.utils.serializers import activity_to_dict
from cloudhub.services.identity_service import CallerContext
from cloudhub.services.ownership import OwnershipGuard
from cloudhub.services.exceptions import UserNotFoundError, AccessDeniedError, RequestValidationError


class ActivityService:
    """활동 기록(감사 로그)의 조회와 추가를 담당합니다."""

    def __init__(
        self,
        activity_repo: IActivityRepository,
        user_repo: IUserRepository,
        project_repo: IProjectRepository,
        service_repo: IServiceRepository,
    ):
        self.activity_repo = activity_repo
        self.user_repo = user_repo
        self.project_repo = project_repo
        self.guard = OwnershipGuard(project_repo, service_repo)

    def list_recent(self, caller: CallerContext, limit: int) -> List[Dict[str, Any]]:
        """요청자 본인의 기록과 요청자 소유 프로젝트의 기록을 최신순으로 조회합니다."""
        project_ids = [p.id for p in self.project_repo.list_by_user_id(caller.user_id)]
        activities = self.activity_repo.list_visible_to(caller.user_id, project_ids, limit)
        return [activity_to_dict(a) for a in activities]

    def list_for_user(self, caller: CallerContext, user_id: int, limit: int) -> List[Dict[str, Any]]:
        """
        특정 사용자의 활동 기록을 조회합니다. 본인의 기록만 볼 수 있습니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            AccessDeniedError: 다른 사용자의 기록을 요청했을 때.
        """
        if not self.user_repo.find_by_id(user_id):
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        if user_id != caller.user_id:
            raise AccessDeniedError("Access denied")
        return [activity_to_dict(a) for a in self.activity_repo.list_by_user_id(user_id, limit)]

    def list_for_project(self, caller: CallerContext, project_id: int, limit: int) -> List[Dict[str, Any]]:
        self.guard.owned_project(caller, project_id)
        return [activity_to_dict(a) for a in self.activity_repo.list_by_project_id(project_id, limit)]

    def create_activity(self, caller: CallerContext, data: ActivityCreate) -> Dict[str, Any]:
        """
        활동 기록을 추가합니다. 기록의 user_id는 항상 요청자로 설정됩니다.

        Raises:
            ProjectNotFoundError / ServiceNotFoundError: 참조한 프로젝트/서비스가 없을 때.
            AccessDeniedError: 참조한 프로젝트/서비스의 소유자가 아닐 때.
            RequestValidationError: serviceId의 서비스가 projectId의 프로젝트에 속하지 않을 때.
        """
        project_id = data.project_id
        if data.project_id is not None:
            self.guard.owned_project(caller, data.project_id)
        if data.service_id is not None:
            _, project = self.guard.owned_service(caller, data.service_id)
            if project_id is None:
                project_id = project.id
            elif project.id != project_id:
                raise RequestValidationError([{
                    "path": "serviceId",
                    "message": f"Service {data.service_id} does not belong to project {project_id}",
                }])

        created = self.activity_repo.create(models.Activity(
            type=data.type,
            message=data.message,
            user_id=caller.user_id,
            project_id=project_id,
            service_id=data.service_id,
        ))
        return activity_to_dict(created)
