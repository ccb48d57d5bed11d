from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker

from cloudhub.repositories import RepositoryBundle
from .sqlalchemy_user_repository import SqlalchemyUserRepository
from .sqlalchemy_project_repository import SqlalchemyProjectRepository
from .sqlalchemy_service_repository import SqlalchemyServiceRepository
from .sqlalchemy_resource_usage_repository import SqlalchemyResourceUsageRepository
from .sqlalchemy_activity_repository import SqlalchemyActivityRepository
from .sqlalchemy_service_health_repository import SqlalchemyServiceHealthRepository


def build_sqlalchemy_repositories(db_session: Session) -> RepositoryBundle:
    """하나의 세션을 공유하는 리포지토리 묶음을 생성합니다."""
    return RepositoryBundle(
        users=SqlalchemyUserRepository(db_session),
        projects=SqlalchemyProjectRepository(db_session),
        services=SqlalchemyServiceRepository(db_session),
        usage=SqlalchemyResourceUsageRepository(db_session),
        activities=SqlalchemyActivityRepository(db_session),
        health=SqlalchemyServiceHealthRepository(db_session),
        rollback=db_session.rollback,
    )


class SqlalchemyRepositoryFactory:
    """요청마다 새 세션을 열고, 요청이 끝나면 닫습니다."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def open(self) -> Iterator[RepositoryBundle]:
        db_session = self.session_factory()
        try:
            yield build_sqlalchemy_repositories(db_session)
        finally:
            db_session.close()
