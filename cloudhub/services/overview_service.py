# cloudhub/services/overview_service.py
import logging
import math
from typing import Any, Callable, Dict, List, Optional, TypeVar

from cloudhub.repositories.interfaces import (
    IProjectRepository, IServiceRepository, IResourceUsageRepository,
    IServiceHealthRepository, IActivityRepository
)
from cloudhub.utils.serializers import project_to_dict, health_to_dict, activity_to_dict
from cloudhub.services.identity_service import CallerContext

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 서비스 type -> 응답의 resources 키
RESOURCE_BUCKETS = {
    "compute": "compute",
    "database": "databases",
    "storage": "storage",
    "function": "functions",
    "network": "network",
    "web3": "web3",
    "spatial": "spatial",
    "3d_amp": "amp3d",
}

# 응답의 usage 키 -> ResourceUsage 속성
USAGE_METRICS = (
    ("cpu", "cpu_usage"),
    ("memory", "memory_usage"),
    ("storage", "storage_usage"),
    ("network", "network_usage"),
)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def average(total: float, count: int) -> int:
    """샘플이 없으면 0을 반환합니다."""
    return round_half_up(total / count) if count else 0


class OverviewService:
    """
    대시보드 개요(overview)를 계산합니다. 결과는 저장하지 않습니다.

    일부 데이터를 읽지 못해도 전체 요청을 실패시키지 않습니다.
    읽지 못한 구역은 빈 값/0으로 채우고, 응답의 degraded/degradedSections로 알려줍니다.
    """

    def __init__(
        self,
        project_repo: IProjectRepository,
        service_repo: IServiceRepository,
        usage_repo: IResourceUsageRepository,
        health_repo: IServiceHealthRepository,
        activity_repo: IActivityRepository,
        activity_limit: int = 4,
        on_failure: Optional[Callable[[], None]] = None,
    ):
        """
        Args:
            on_failure: 구역 조회가 실패한 직후 호출됩니다. SQL 저장소에서는 세션 rollback을 넘겨
                실패한 트랜잭션이 다음 구역의 조회까지 막지 않도록 합니다.
        """
        self.project_repo = project_repo
        self.service_repo = service_repo
        self.usage_repo = usage_repo
        self.health_repo = health_repo
        self.activity_repo = activity_repo
        self.activity_limit = activity_limit
        self.on_failure = on_failure

    def build_overview(self, caller: CallerContext) -> Dict[str, Any]:
        """
        요청자의 프로젝트/서비스/사용률을 모아 개요를 만듭니다.

        1. 요청자 소유 프로젝트를 조회합니다.
        2. 프로젝트별 서비스를 조회하여 타입별로 개수를 셉니다.
        3. 서비스별 가장 최근 사용률 샘플을 지표별로 합산합니다.
        4. 지표별 평균을 반올림하여 정수로 만듭니다. (샘플이 없으면 0)
        5. 서비스 상태 보드 전체와 요청자가 볼 수 있는 최근 활동을 붙입니다.
        """
        degraded: List[str] = []

        projects = self._best_effort(
            "projects", degraded, lambda: self.project_repo.list_by_user_id(caller.user_id), []
        )

        resources = {bucket: 0 for bucket in RESOURCE_BUCKETS.values()}
        totals = {name: 0.0 for name, _ in USAGE_METRICS}
        sample_count = 0
        database_cpu_total, database_samples = 0.0, 0

        for project in projects:
            services = self._best_effort(
                "services", degraded, lambda: self.service_repo.list_by_project_id(project.id), []
            )
            for service in services:
                bucket = RESOURCE_BUCKETS.get(service.type)
                if bucket:
                    resources[bucket] += 1

                latest = self._best_effort(
                    "usage", degraded, lambda: self.usage_repo.find_latest_by_service_id(service.id), None
                )
                if latest is None:
                    continue
                for name, attribute in USAGE_METRICS:
                    totals[name] += getattr(latest, attribute) or 0
                sample_count += 1
                if service.type == "database":
                    database_cpu_total += latest.cpu_usage or 0
                    database_samples += 1

        # 현재는 배포 상태를 따로 추적하지 않으므로 healthy는 total과 같습니다.
        resources["deployments"] = {"total": len(projects), "healthy": len(projects)}

        usage = {name: average(totals[name], sample_count) for name, _ in USAGE_METRICS}
        usage["database"] = average(database_cpu_total, database_samples)

        health = self._best_effort("serviceHealth", degraded, self.health_repo.list_all, [])
        project_ids = [p.id for p in projects]
        activities = self._best_effort(
            "recentActivities", degraded,
            lambda: self.activity_repo.list_visible_to(caller.user_id, project_ids, self.activity_limit),
            [],
        )

        return {
            "resources": resources,
            "usage": usage,
            "serviceHealth": [health_to_dict(h) for h in health],
            "recentActivities": [activity_to_dict(a) for a in activities],
            "projects": [project_to_dict(p) for p in projects],
            "degraded": bool(degraded),
            "degradedSections": degraded,
        }

    def _best_effort(self, section: str, degraded: List[str], read: Callable[[], T], fallback: T) -> T:
        try:
            return read()
        except Exception:
            logger.exception("Overview section '%s' could not be read; using fallback value", section)
            if self.on_failure is not None:
                self.on_failure()
            if section not in degraded:
                degraded.append(section)
            return fallback
