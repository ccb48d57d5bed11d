from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from cloudhub.database import models

class IActivityRepository(ABC):
    @abstractmethod
    def create(self, activity_model: models.Activity) -> models.Activity:
        """새로운 활동 기록을 추가합니다."""
        pass

    @abstractmethod
    def find_by_id(self, activity_id: int) -> Optional[models.Activity]:
        """고유 ID로 특정 활동 기록을 조회합니다."""
        pass

    @abstractmethod
    def list_recent(self, limit: int) -> List[models.Activity]:
        """전체 활동 기록을 최신순으로 조회합니다."""
        pass

    @abstractmethod
    def list_by_user_id(self, user_id: int, limit: int) -> List[models.Activity]:
        """특정 사용자의 활동 기록을 최신순으로 조회합니다."""
        pass

    @abstractmethod
    def list_by_project_id(self, project_id: int, limit: int) -> List[models.Activity]:
        """특정 프로젝트의 활동 기록을 최신순으로 조회합니다."""
        pass

    @abstractmethod
    def list_visible_to(self, user_id: int, project_ids: Iterable[int], limit: int) -> List[models.Activity]:
        """
        사용자가 볼 수 있는 활동 기록을 최신순으로 조회합니다.
        본인이 남긴 기록이거나, 본인 소유 프로젝트에 연결된 기록이 해당됩니다.
        """
        pass

    @abstractmethod
    def detach_project(self, project_id: int) -> int:
        """프로젝트 삭제 시 해당 프로젝트를 가리키는 기록의 project_id를 비웁니다."""
        pass

    @abstractmethod
    def detach_service(self, service_id: int) -> int:
        """서비스 삭제 시 해당 서비스를 가리키는 기록의 service_id를 비웁니다."""
        pass
