from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from cloudhub.database import models, utcnow
from cloudhub.repositories.interfaces import IServiceHealthRepository

class SqlalchemyServiceHealthRepository(IServiceHealthRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def list_all(self) -> List[models.ServiceHealthStatus]:
        return self.db.query(models.ServiceHealthStatus).order_by(models.ServiceHealthStatus.service_type.asc()).all()

    def find_by_type(self, service_type: str) -> Optional[models.ServiceHealthStatus]:
        return self.db.query(models.ServiceHealthStatus).filter(
            models.ServiceHealthStatus.service_type == service_type
        ).first()

    def create(self, status_model: models.ServiceHealthStatus) -> models.ServiceHealthStatus:
        existing = self.find_by_type(status_model.service_type)
        if existing:
            # 타입별로 하나의 레코드만 유지 (upsert)
            existing.status = status_model.status or existing.status
            if status_model.uptime is not None:
                existing.uptime = status_model.uptime
            existing.last_updated = utcnow()
            self.db.commit()
            self.db.refresh(existing)
            return existing
        if status_model.last_updated is None:
            status_model.last_updated = utcnow()
        self.db.add(status_model)
        self.db.commit()
        self.db.refresh(status_model)
        return status_model

    def update(self, service_type: str, fields: Dict[str, Any]) -> Optional[models.ServiceHealthStatus]:
        status = self.find_by_type(service_type)
        if not status:
            return None
        for key, value in fields.items():
            setattr(status, key, value)
        status.last_updated = utcnow()
        self.db.commit()
        self.db.refresh(status)
        return status
