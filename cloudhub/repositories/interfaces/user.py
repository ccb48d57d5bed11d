from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any
from cloudhub.database import models

class IUserRepository(ABC):
    @abstractmethod
    def create(self, user_model: models.User) -> models.User:
        """새로운 사용자를 저장소에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[models.User]:
        """고유 ID로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def find_by_username(self, username: str) -> Optional[models.User]:
        """사용자 이름으로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.User]:
        """모든 사용자의 목록을 조회합니다."""
        pass

    @abstractmethod
    def update(self, user_id: int, fields: Dict[str, Any]) -> Optional[models.User]:
        """
        사용자의 일부 필드를 수정합니다.

        Returns:
            수정된 사용자. 해당 ID의 사용자가 없으면 None.
        """
        pass
