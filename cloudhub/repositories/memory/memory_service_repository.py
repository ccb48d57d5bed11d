import copy
from typing import List, Optional, Dict, Any
from cloudhub.database import models, utcnow
from cloudhub.repositories.interfaces import IServiceRepository
from .memory_base import MemoryTable

class MemoryServiceRepository(IServiceRepository):
    def __init__(self):
        self.table: MemoryTable[models.Service] = MemoryTable()

    def create(self, service_model: models.Service) -> models.Service:
        if service_model.status is None:
            service_model.status = "active"
        # 호출자가 넘긴 dict와 저장된 설정 문서가 서로 영향을 주지 않도록 복사합니다.
        service_model.config = copy.deepcopy(service_model.config) if service_model.config is not None else {}
        if service_model.created_at is None:
            service_model.created_at = utcnow()
        return self.table.insert(service_model)

    def find_by_id(self, service_id: int) -> Optional[models.Service]:
        return self.table.get(service_id)

    def list_by_project_id(self, project_id: int) -> List[models.Service]:
        return sorted(self.table.select(lambda s: s.project_id == project_id), key=lambda s: s.id)

    def update(self, service_id: int, fields: Dict[str, Any]) -> Optional[models.Service]:
        if "config" in fields:
            fields = {**fields, "config": copy.deepcopy(fields["config"])}
        return self.table.patch(service_id, fields)

    def delete(self, service_id: int) -> bool:
        return self.table.remove(service_id)

    def delete_by_project_id(self, project_id: int) -> int:
        return self.table.remove_where(lambda s: s.project_id == project_id)
