from dataclasses import dataclass
from typing import Callable

from cloudhub.repositories.interfaces import (
    IUserRepository, IProjectRepository, IServiceRepository,
    IResourceUsageRepository, IActivityRepository, IServiceHealthRepository,
)


def _nothing_to_roll_back() -> None:
    return None


@dataclass
class RepositoryBundle:
    """
    요청 하나에서 함께 사용하는 여섯 종류의 리포지토리 묶음.

    rollback은 조회 실패 후 공유 세션의 트랜잭션을 되돌립니다.
    (PostgreSQL은 실패한 쿼리 이후 같은 트랜잭션의 모든 쿼리를 거부합니다.)
    인메모리 구현에서는 아무 일도 하지 않습니다.
    """
    users: IUserRepository
    projects: IProjectRepository
    services: IServiceRepository
    usage: IResourceUsageRepository
    activities: IActivityRepository
    health: IServiceHealthRepository
    rollback: Callable[[], None] = _nothing_to_roll_back
