from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from cloudhub.database import models
from cloudhub.repositories.interfaces import IServiceRepository

class SqlalchemyServiceRepository(IServiceRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, service_model: models.Service) -> models.Service:
        self.db.add(service_model)
        self.db.commit()
        self.db.refresh(service_model)
        return service_model

    def find_by_id(self, service_id: int) -> Optional[models.Service]:
        return self.db.query(models.Service).filter(models.Service.id == service_id).first()

    def list_by_project_id(self, project_id: int) -> List[models.Service]:
        return self.db.query(models.Service).filter(models.Service.project_id == project_id).order_by(models.Service.id.asc()).all()

    def update(self, service_id: int, fields: Dict[str, Any]) -> Optional[models.Service]:
        service = self.find_by_id(service_id)
        if not service:
            return None
        for key, value in fields.items():
            setattr(service, key, value)
        self.db.commit()
        self.db.refresh(service)
        return service

    def delete(self, service_id: int) -> bool:
        service = self.find_by_id(service_id)
        if service:
            self.db.delete(service)
            self.db.commit()
            return True
        return False

    def delete_by_project_id(self, project_id: int) -> int:
        deleted = self.db.query(models.Service).filter(models.Service.project_id == project_id).delete(synchronize_session=False)
        self.db.commit()
        return deleted
