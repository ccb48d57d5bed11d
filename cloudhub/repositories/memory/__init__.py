from contextlib import contextmanager
from typing import Iterator

from cloudhub.repositories import RepositoryBundle
from .memory_user_repository import MemoryUserRepository
from .memory_project_repository import MemoryProjectRepository
from .memory_service_repository import MemoryServiceRepository
from .memory_resource_usage_repository import MemoryResourceUsageRepository
from .memory_activity_repository import MemoryActivityRepository
from .memory_service_health_repository import MemoryServiceHealthRepository


def build_memory_repositories() -> RepositoryBundle:
    return RepositoryBundle(
        users=MemoryUserRepository(),
        projects=MemoryProjectRepository(),
        services=MemoryServiceRepository(),
        usage=MemoryResourceUsageRepository(),
        activities=MemoryActivityRepository(),
        health=MemoryServiceHealthRepository(),
    )


class MemoryRepositoryFactory:
    """프로세스 전체에서 하나의 인메모리 리포지토리 묶음을 공유합니다."""

    def __init__(self):
        self.bundle = build_memory_repositories()

    @contextmanager
    def open(self) -> Iterator[RepositoryBundle]:
        yield self.bundle
