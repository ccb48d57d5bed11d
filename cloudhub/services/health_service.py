import logging
from typing import Dict, Any, List

from cloudhub.database import models
from cloudhub.repositories.interfaces import IServiceHealthRepository
from cloudhub.schemas import ServiceHealthUpsert
from cloudhub.utils.serializers import health_to_dict
from cloudhub.services.identity_service import CallerContext
from cloudhub.services.exceptions import ServiceHealthNotFoundError, AccessDeniedError

logger = logging.getLogger(__name__)


class HealthService:
    """서비스 타입별 상태 보드를 조회하고 갱신합니다."""

    def __init__(self, health_repo: IServiceHealthRepository):
        self.health_repo = health_repo

    def list_statuses(self) -> List[Dict[str, Any]]:
        return [health_to_dict(h) for h in self.health_repo.list_all()]

    def get_status(self, service_type: str) -> Dict[str, Any]:
        """
        Raises:
            ServiceHealthNotFoundError: 해당 타입의 상태 레코드가 없을 때.
        """
        status = self.health_repo.find_by_type(service_type)
        if not status:
            raise ServiceHealthNotFoundError(f"Service health status for '{service_type}' not found.")
        return health_to_dict(status)

    def upsert_status(self, caller: CallerContext, service_type: str, data: ServiceHealthUpsert) -> Dict[str, Any]:
        """
        타입별 상태를 생성하거나 갱신합니다. 관리자만 호출할 수 있습니다.

        Raises:
            AccessDeniedError: 요청자가 관리자가 아닐 때.
        """
        if not caller.is_admin:
            raise AccessDeniedError("Only administrators can update service health.")

        fields = data.model_dump(exclude_none=True)
        status = self.health_repo.update(service_type, fields)
        if status is None:
            status = self.health_repo.create(models.ServiceHealthStatus(service_type=service_type, **fields))
        logger.info("Service health for '%s' set to %s", service_type, status.status)
        return health_to_dict(status)
