import logging
from typing import Dict, Any, List, Optional

from cloudhub.database import models
from cloudhub.repositories.interfaces import (
    IProjectRepository, IServiceRepository, IResourceUsageRepository, IActivityRepository
)
from cloudhub.schemas import ServiceCreate, ServiceUpdate, ResourceUsageCreate, validate_service_config
from cloudhub.utils.serializers import service_to_dict, usage_to_dict
from cloudhub.services.identity_service import CallerContext
from cloudhub.services.ownership import OwnershipGuard
from cloudhub.services.exceptions import ServiceNotFoundError

logger = logging.getLogger(__name__)


class ProvisioningService:
    """프로젝트에 속한 클라우드 서비스와 서비스별 자원 사용률 샘플을 관리합니다."""

    def __init__(
        self,
        project_repo: IProjectRepository,
        service_repo: IServiceRepository,
        usage_repo: IResourceUsageRepository,
        activity_repo: IActivityRepository,
    ):
        self.service_repo = service_repo
        self.usage_repo = usage_repo
        self.activity_repo = activity_repo
        self.guard = OwnershipGuard(project_repo, service_repo)

    def list_services(self, caller: CallerContext, project_id: int) -> List[Dict[str, Any]]:
        """
        특정 프로젝트의 서비스 목록을 조회합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            AccessDeniedError: 요청자가 프로젝트 소유자가 아닐 때.
        """
        self.guard.owned_project(caller, project_id)
        return [service_to_dict(s) for s in self.service_repo.list_by_project_id(project_id)]

    def get_service(self, caller: CallerContext, service_id: int) -> Dict[str, Any]:
        service, _ = self.guard.owned_service(caller, service_id)
        return service_to_dict(service)

    def create_service(self, caller: CallerContext, data: ServiceCreate) -> Dict[str, Any]:
        """
        새로운 서비스를 프로비저닝하고 'service_created' 활동을 기록합니다.

        존재하지 않는 프로젝트를 가리키면 고아 레코드를 만들지 않고 NotFound로 거부합니다.

        Raises:
            ProjectNotFoundError: project_id의 프로젝트를 찾을 수 없을 때.
            AccessDeniedError: 요청자가 프로젝트 소유자가 아닐 때.
            RequestValidationError: config가 서비스 타입의 스키마와 맞지 않을 때.
        """
        project = self.guard.owned_project(caller, data.project_id)
        config = validate_service_config(data.type, data.config)

        created = self.service_repo.create(models.Service(
            name=data.name,
            type=data.type,
            status=data.status,
            config=config,
            project_id=project.id,
        ))
        self.activity_repo.create(models.Activity(
            type="service_created",
            message=f"{created.name} service created",
            user_id=caller.user_id,
            project_id=project.id,
            service_id=created.id,
        ))
        logger.info("Service %s (%s) created in project %s", created.id, created.type, project.id)
        return service_to_dict(created)

    def update_service(self, caller: CallerContext, service_id: int, data: ServiceUpdate) -> Dict[str, Any]:
        """
        서비스를 수정합니다. type이나 config가 바뀌면 바뀐 조합으로 config를 다시 검증합니다.

        Raises:
            ServiceNotFoundError: 해당 ID의 서비스를 찾을 수 없을 때.
            AccessDeniedError: 요청자가 상위 프로젝트의 소유자가 아닐 때.
            RequestValidationError: 바뀐 type/config 조합이 유효하지 않을 때.
        """
        service, _ = self.guard.owned_service(caller, service_id)
        fields = data.model_dump(exclude_unset=True, exclude_none=True)

        if "type" in fields or "config" in fields:
            service_type = fields.get("type", service.type)
            config = fields.get("config", service.config)
            fields["config"] = validate_service_config(service_type, config)

        updated = self.service_repo.update(service_id, fields)
        if not updated:
            raise ServiceNotFoundError(f"Service with id '{service_id}' not found.")
        return service_to_dict(updated)

    def delete_service(self, caller: CallerContext, service_id: int) -> bool:
        """
        서비스와 사용률 샘플을 삭제합니다. 활동 기록의 service_id는 비웁니다.

        Raises:
            ServiceNotFoundError: 해당 ID의 서비스를 찾을 수 없을 때.
            AccessDeniedError: 요청자가 상위 프로젝트의 소유자가 아닐 때.
        """
        self.guard.owned_service(caller, service_id)
        self.usage_repo.delete_by_service_id(service_id)
        self.activity_repo.detach_service(service_id)
        if not self.service_repo.delete(service_id):
            raise ServiceNotFoundError(f"Service with id '{service_id}' not found.")
        logger.info("Service %s deleted by user %s", service_id, caller.user_id)
        return True

    def list_usage(self, caller: CallerContext, service_id: int, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """서비스의 사용률 샘플을 최신순으로 조회합니다."""
        self.guard.owned_service(caller, service_id)
        return [usage_to_dict(u) for u in self.usage_repo.list_by_service_id(service_id, limit)]

    def record_usage(self, caller: CallerContext, data: ResourceUsageCreate) -> Dict[str, Any]:
        """
        사용률 샘플을 추가합니다.

        Raises:
            ServiceNotFoundError: service_id의 서비스가 없을 때. 이 경우 샘플은 저장되지 않습니다.
            AccessDeniedError: 요청자가 상위 프로젝트의 소유자가 아닐 때.
        """
        self.guard.owned_service(caller, data.service_id)
        created = self.usage_repo.create(models.ResourceUsage(**data.model_dump(exclude_none=True)))
        return usage_to_dict(created)
