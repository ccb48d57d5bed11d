# cloudhub/services/ownership.py
from typing import Tuple

from cloudhub.database import models
from cloudhub.repositories.interfaces import IProjectRepository, IServiceRepository
from cloudhub.services.identity_service import CallerContext
from cloudhub.services.exceptions import (
    ProjectNotFoundError, ServiceNotFoundError, AccessDeniedError
)


class OwnershipGuard:
    """
    프로젝트/서비스 단위 접근 제어.

    대상이 없으면 NotFound, 대상은 있지만 요청자가 소유자가 아니면 AccessDenied를 발생시킵니다.
    두 조건이 겹치면 NotFound가 우선합니다.
    """

    def __init__(self, project_repo: IProjectRepository, service_repo: IServiceRepository):
        self.project_repo = project_repo
        self.service_repo = service_repo

    def owned_project(self, caller: CallerContext, project_id: int) -> models.Project:
        project = self.project_repo.find_by_id(project_id)
        if not project:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")
        if project.user_id != caller.user_id:
            raise AccessDeniedError("Access denied")
        return project

    def owned_service(self, caller: CallerContext, service_id: int) -> Tuple[models.Service, models.Project]:
        """서비스의 실효 소유자는 상위 프로젝트의 소유자입니다."""
        service = self.service_repo.find_by_id(service_id)
        if not service:
            raise ServiceNotFoundError(f"Service with id '{service_id}' not found.")
        project = self.project_repo.find_by_id(service.project_id)
        if not project:
            # 상위 프로젝트가 사라진 서비스는 없는 것으로 취급합니다.
            raise ServiceNotFoundError(f"Service with id '{service_id}' not found.")
        if project.user_id != caller.user_id:
            raise AccessDeniedError("Access denied")
        return service, project
