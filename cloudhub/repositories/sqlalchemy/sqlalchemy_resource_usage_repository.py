from typing import List, Optional
from sqlalchemy.orm import Session
from cloudhub.database import models
from cloudhub.repositories.interfaces import IResourceUsageRepository

class SqlalchemyResourceUsageRepository(IResourceUsageRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, usage_model: models.ResourceUsage) -> models.ResourceUsage:
        self.db.add(usage_model)
        self.db.commit()
        self.db.refresh(usage_model)
        return usage_model

    def _newest_first(self, service_id: int):
        return self.db.query(models.ResourceUsage).filter(
            models.ResourceUsage.service_id == service_id
        ).order_by(models.ResourceUsage.timestamp.desc(), models.ResourceUsage.id.desc())

    def list_by_service_id(self, service_id: int, limit: Optional[int] = None) -> List[models.ResourceUsage]:
        query = self._newest_first(service_id)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def find_latest_by_service_id(self, service_id: int) -> Optional[models.ResourceUsage]:
        return self._newest_first(service_id).first()

    def delete_by_service_id(self, service_id: int) -> int:
        deleted = self.db.query(models.ResourceUsage).filter(models.ResourceUsage.service_id == service_id).delete(synchronize_session=False)
        self.db.commit()
        return deleted
