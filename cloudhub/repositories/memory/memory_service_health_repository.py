from typing import List, Optional, Dict, Any
from cloudhub.database import models, utcnow
from cloudhub.repositories.interfaces import IServiceHealthRepository
from .memory_base import MemoryTable

class MemoryServiceHealthRepository(IServiceHealthRepository):
    def __init__(self):
        self.table: MemoryTable[models.ServiceHealthStatus] = MemoryTable()

    def list_all(self) -> List[models.ServiceHealthStatus]:
        return sorted(self.table.select(), key=lambda h: h.service_type)

    def find_by_type(self, service_type: str) -> Optional[models.ServiceHealthStatus]:
        matches = self.table.select(lambda h: h.service_type == service_type)
        return matches[0] if matches else None

    def create(self, status_model: models.ServiceHealthStatus) -> models.ServiceHealthStatus:
        existing = self.find_by_type(status_model.service_type)
        if existing:
            fields = {"status": status_model.status or existing.status}
            if status_model.uptime is not None:
                fields["uptime"] = status_model.uptime
            return self.update(status_model.service_type, fields)
        if status_model.status is None:
            status_model.status = "operational"
        if status_model.uptime is None:
            status_model.uptime = 100.0
        status_model.last_updated = status_model.last_updated or utcnow()
        return self.table.insert(status_model)

    def update(self, service_type: str, fields: Dict[str, Any]) -> Optional[models.ServiceHealthStatus]:
        existing = self.find_by_type(service_type)
        if not existing:
            return None
        return self.table.patch(existing.id, {**fields, "last_updated": utcnow()})
