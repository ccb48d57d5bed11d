from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any
from cloudhub.database import models

class IServiceHealthRepository(ABC):
    @abstractmethod
    def list_all(self) -> List[models.ServiceHealthStatus]:
        """모든 서비스 타입의 상태를 타입 이름 순으로 조회합니다."""
        pass

    @abstractmethod
    def find_by_type(self, service_type: str) -> Optional[models.ServiceHealthStatus]:
        """서비스 타입(자연 키)으로 상태를 조회합니다."""
        pass

    @abstractmethod
    def create(self, status_model: models.ServiceHealthStatus) -> models.ServiceHealthStatus:
        """
        서비스 타입 상태를 저장합니다.
        같은 service_type의 레코드가 이미 있으면 새로 만들지 않고 그 레코드를 덮어씁니다.
        """
        pass

    @abstractmethod
    def update(self, service_type: str, fields: Dict[str, Any]) -> Optional[models.ServiceHealthStatus]:
        """
        서비스 타입 상태의 일부 필드를 수정하고 last_updated를 갱신합니다.
        해당 타입의 레코드가 없으면 None을 반환합니다.
        """
        pass
