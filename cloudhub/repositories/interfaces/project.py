from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any
from cloudhub.database import models

class IProjectRepository(ABC):
    @abstractmethod
    def create(self, project_model: models.Project) -> models.Project:
        """새로운 프로젝트를 저장소에 생성합니다. ID와 생성 시각은 저장소가 할당합니다."""
        pass

    @abstractmethod
    def find_by_id(self, project_id: int) -> Optional[models.Project]:
        """고유 ID로 특정 프로젝트를 조회합니다."""
        pass

    @abstractmethod
    def list_by_user_id(self, user_id: int) -> List[models.Project]:
        """특정 사용자가 소유한 모든 프로젝트를 ID 순으로 조회합니다."""
        pass

    @abstractmethod
    def update(self, project_id: int, fields: Dict[str, Any]) -> Optional[models.Project]:
        """
        프로젝트의 일부 필드를 수정합니다.

        Returns:
            수정된 프로젝트. 해당 ID의 프로젝트가 없으면 None.
        """
        pass

    @abstractmethod
    def delete(self, project_id: int) -> bool:
        """프로젝트를 삭제합니다. 해당 ID가 없으면 False를 반환합니다."""
        pass
