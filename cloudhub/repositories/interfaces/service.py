from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any
from cloudhub.database import models

class IServiceRepository(ABC):
    @abstractmethod
    def create(self, service_model: models.Service) -> models.Service:
        """새로운 서비스를 저장소에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, service_id: int) -> Optional[models.Service]:
        """고유 ID로 특정 서비스를 조회합니다."""
        pass

    @abstractmethod
    def list_by_project_id(self, project_id: int) -> List[models.Service]:
        """특정 프로젝트에 속한 모든 서비스를 ID 순으로 조회합니다."""
        pass

    @abstractmethod
    def update(self, service_id: int, fields: Dict[str, Any]) -> Optional[models.Service]:
        """서비스의 일부 필드를 수정합니다. 해당 ID가 없으면 None을 반환합니다."""
        pass

    @abstractmethod
    def delete(self, service_id: int) -> bool:
        """서비스를 삭제합니다. 해당 ID가 없으면 False를 반환합니다."""
        pass

    @abstractmethod
    def delete_by_project_id(self, project_id: int) -> int:
        """특정 프로젝트에 속한 서비스를 모두 삭제하고, 삭제된 개수를 반환합니다."""
        pass
