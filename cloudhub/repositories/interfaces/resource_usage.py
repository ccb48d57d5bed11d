from abc import ABC, abstractmethod
from typing import List, Optional
from cloudhub.database import models

class IResourceUsageRepository(ABC):
    @abstractmethod
    def create(self, usage_model: models.ResourceUsage) -> models.ResourceUsage:
        """새로운 사용률 샘플을 추가합니다. timestamp가 비어 있으면 현재 시각을 사용합니다."""
        pass

    @abstractmethod
    def list_by_service_id(self, service_id: int, limit: Optional[int] = None) -> List[models.ResourceUsage]:
        """
        특정 서비스의 사용률 샘플을 최신순(timestamp 내림차순, 같은 시각이면 ID 내림차순)으로 조회합니다.

        Args:
            service_id: 샘플을 조회할 서비스의 ID.
            limit: 최대 개수. None이면 전체를 반환합니다.
        """
        pass

    @abstractmethod
    def find_latest_by_service_id(self, service_id: int) -> Optional[models.ResourceUsage]:
        """시간상 가장 마지막 샘플을 조회합니다. (가장 마지막에 추가된 샘플이 아님)"""
        pass

    @abstractmethod
    def delete_by_service_id(self, service_id: int) -> int:
        """특정 서비스의 샘플을 모두 삭제하고, 삭제된 개수를 반환합니다."""
        pass
