from typing import List, Optional
from cloudhub.database import models, utcnow
from cloudhub.repositories.interfaces import IResourceUsageRepository
from .memory_base import MemoryTable, newest_first

class MemoryResourceUsageRepository(IResourceUsageRepository):
    def __init__(self):
        self.table: MemoryTable[models.ResourceUsage] = MemoryTable()

    def create(self, usage_model: models.ResourceUsage) -> models.ResourceUsage:
        for metric in ("cpu_usage", "memory_usage", "storage_usage", "network_usage"):
            if getattr(usage_model, metric) is None:
                setattr(usage_model, metric, 0.0)
        if usage_model.timestamp is None:
            usage_model.timestamp = utcnow()
        return self.table.insert(usage_model)

    def list_by_service_id(self, service_id: int, limit: Optional[int] = None) -> List[models.ResourceUsage]:
        return newest_first(self.table.select(lambda u: u.service_id == service_id), limit)

    def find_latest_by_service_id(self, service_id: int) -> Optional[models.ResourceUsage]:
        samples = self.list_by_service_id(service_id, limit=1)
        return samples[0] if samples else None

    def delete_by_service_id(self, service_id: int) -> int:
        return self.table.remove_where(lambda u: u.service_id == service_id)
