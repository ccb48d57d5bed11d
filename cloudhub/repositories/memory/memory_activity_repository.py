from typing import Iterable, List, Optional
from cloudhub.database import models, utcnow
from cloudhub.repositories.interfaces import IActivityRepository
from .memory_base import MemoryTable, newest_first

class MemoryActivityRepository(IActivityRepository):
    def __init__(self):
        self.table: MemoryTable[models.Activity] = MemoryTable()

    def create(self, activity_model: models.Activity) -> models.Activity:
        if activity_model.timestamp is None:
            activity_model.timestamp = utcnow()
        return self.table.insert(activity_model)

    def find_by_id(self, activity_id: int) -> Optional[models.Activity]:
        return self.table.get(activity_id)

    def list_recent(self, limit: int) -> List[models.Activity]:
        return newest_first(self.table.select(), limit)

    def list_by_user_id(self, user_id: int, limit: int) -> List[models.Activity]:
        return newest_first(self.table.select(lambda a: a.user_id == user_id), limit)

    def list_by_project_id(self, project_id: int, limit: int) -> List[models.Activity]:
        return newest_first(self.table.select(lambda a: a.project_id == project_id), limit)

    def list_visible_to(self, user_id: int, project_ids: Iterable[int], limit: int) -> List[models.Activity]:
        project_ids = set(project_ids)
        return newest_first(
            self.table.select(lambda a: a.user_id == user_id or a.project_id in project_ids),
            limit,
        )

    def detach_project(self, project_id: int) -> int:
        rows = self.table.select(lambda a: a.project_id == project_id)
        for row in rows:
            self.table.patch(row.id, {"project_id": None})
        return len(rows)

    def detach_service(self, service_id: int) -> int:
        rows = self.table.select(lambda a: a.service_id == service_id)
        for row in rows:
            self.table.patch(row.id, {"service_id": None})
        return len(rows)
