from typing import Iterable, List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from cloudhub.database import models
from cloudhub.repositories.interfaces import IActivityRepository

class SqlalchemyActivityRepository(IActivityRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, activity_model: models.Activity) -> models.Activity:
        self.db.add(activity_model)
        self.db.commit()
        self.db.refresh(activity_model)
        return activity_model

    def find_by_id(self, activity_id: int) -> Optional[models.Activity]:
        return self.db.query(models.Activity).filter(models.Activity.id == activity_id).first()

    def _newest_first(self, *criteria):
        return self.db.query(models.Activity).filter(*criteria).order_by(
            models.Activity.timestamp.desc(), models.Activity.id.desc()
        )

    def list_recent(self, limit: int) -> List[models.Activity]:
        return self._newest_first().limit(limit).all()

    def list_by_user_id(self, user_id: int, limit: int) -> List[models.Activity]:
        return self._newest_first(models.Activity.user_id == user_id).limit(limit).all()

    def list_by_project_id(self, project_id: int, limit: int) -> List[models.Activity]:
        return self._newest_first(models.Activity.project_id == project_id).limit(limit).all()

    def list_visible_to(self, user_id: int, project_ids: Iterable[int], limit: int) -> List[models.Activity]:
        project_ids = list(project_ids)
        criterion = models.Activity.user_id == user_id
        if project_ids:
            criterion = or_(criterion, models.Activity.project_id.in_(project_ids))
        return self._newest_first(criterion).limit(limit).all()

    def detach_project(self, project_id: int) -> int:
        updated = self.db.query(models.Activity).filter(
            models.Activity.project_id == project_id
        ).update({models.Activity.project_id: None}, synchronize_session=False)
        self.db.commit()
        return updated

    def detach_service(self, service_id: int) -> int:
        updated = self.db.query(models.Activity).filter(
            models.Activity.service_id == service_id
        ).update({models.Activity.service_id: None}, synchronize_session=False)
        self.db.commit()
        return updated
