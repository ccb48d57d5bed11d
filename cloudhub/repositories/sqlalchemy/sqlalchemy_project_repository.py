from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from cloudhub.database import models
from cloudhub.repositories.interfaces import IProjectRepository

class SqlalchemyProjectRepository(IProjectRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, project_model: models.Project) -> models.Project:
        self.db.add(project_model)
        self.db.commit()
        self.db.refresh(project_model)
        return project_model

    def find_by_id(self, project_id: int) -> Optional[models.Project]:
        return self.db.query(models.Project).filter(models.Project.id == project_id).first()

    def list_by_user_id(self, user_id: int) -> List[models.Project]:
        return self.db.query(models.Project).filter(models.Project.user_id == user_id).order_by(models.Project.id.asc()).all()

    def update(self, project_id: int, fields: Dict[str, Any]) -> Optional[models.Project]:
        project = self.find_by_id(project_id)
        if not project:
            return None
        for key, value in fields.items():
            setattr(project, key, value)
        self.db.commit()
        self.db.refresh(project)
        return project

    def delete(self, project_id: int) -> bool:
        project = self.find_by_id(project_id)
        if project:
            self.db.delete(project)
            self.db.commit()
            return True
        return False
