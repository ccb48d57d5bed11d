from typing import List, Optional, Dict, Any
from cloudhub.database import models, utcnow
from cloudhub.repositories.interfaces import IProjectRepository
from .memory_base import MemoryTable

class MemoryProjectRepository(IProjectRepository):
    def __init__(self):
        self.table: MemoryTable[models.Project] = MemoryTable()

    def create(self, project_model: models.Project) -> models.Project:
        # SQLAlchemy 컬럼 기본값은 flush 시점에만 적용되므로 여기서 직접 채웁니다.
        if project_model.status is None:
            project_model.status = "development"
        if project_model.cost_per_month is None:
            project_model.cost_per_month = 0.0
        if project_model.created_at is None:
            project_model.created_at = utcnow()
        return self.table.insert(project_model)

    def find_by_id(self, project_id: int) -> Optional[models.Project]:
        return self.table.get(project_id)

    def list_by_user_id(self, user_id: int) -> List[models.Project]:
        return sorted(self.table.select(lambda p: p.user_id == user_id), key=lambda p: p.id)

    def update(self, project_id: int, fields: Dict[str, Any]) -> Optional[models.Project]:
        return self.table.patch(project_id, fields)

    def delete(self, project_id: int) -> bool:
        return self.table.remove(project_id)
