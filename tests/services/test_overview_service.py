# tests/services/test_overview_service.py
import pytest
from datetime import timedelta
from unittest.mock import MagicMock

from sqlalchemy import text

from cloudhub.services.overview_service import OverviewService, round_half_up
from cloudhub.repositories.memory import build_memory_repositories
from cloudhub.repositories.sqlalchemy import build_sqlalchemy_repositories
from cloudhub.database import models, utcnow

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def memory_repos():
    return build_memory_repositories()

@pytest.fixture
def overview_service(memory_repos) -> OverviewService:
    return OverviewService(
        memory_repos.projects, memory_repos.services, memory_repos.usage,
        memory_repos.health, memory_repos.activities, activity_limit=4,
    )

def add_service(repos, project_id, service_type, name="svc"):
    return repos.services.create(models.Service(name=name, type=service_type, project_id=project_id, config={}))

def add_sample(repos, service_id, cpu, memory=0.0, age_minutes=0):
    return repos.usage.create(models.ResourceUsage(
        service_id=service_id, cpu_usage=cpu, memory_usage=memory,
        storage_usage=0.0, network_usage=0.0,
        timestamp=utcnow() - timedelta(minutes=age_minutes),
    ))

# ===================================================================
#  집계(Aggregation) 테스트
# ===================================================================
class TestOverviewAggregation:
    def test_empty_overview_has_zero_counters(self, overview_service, caller):
        """프로젝트가 없으면 모든 카운터와 평균이 0입니다."""
        # === Act ===
        overview = overview_service.build_overview(caller)

        # === Assert ===
        assert overview["resources"]["compute"] == 0
        assert overview["resources"]["deployments"] == {"total": 0, "healthy": 0}
        assert overview["usage"] == {"cpu": 0, "memory": 0, "storage": 0, "network": 0, "database": 0}
        assert overview["projects"] == []
        assert overview["degraded"] is False

    def test_counts_services_by_type(self, overview_service, memory_repos, caller):
        # === Arrange ===
        project = memory_repos.projects.create(models.Project(name="Demo", user_id=caller.user_id))
        add_service(memory_repos, project.id, "compute")
        add_service(memory_repos, project.id, "compute")
        add_service(memory_repos, project.id, "database")
        add_service(memory_repos, project.id, "3d_amp")

        # === Act ===
        resources = overview_service.build_overview(caller)["resources"]

        # === Assert ===
        assert resources["compute"] == 2
        assert resources["databases"] == 1
        assert resources["amp3d"] == 1
        assert resources["functions"] == 0
        assert resources["deployments"] == {"total": 1, "healthy": 1}

    def test_averages_latest_sample_per_service(self, overview_service, memory_repos, caller):
        """서비스별로 가장 최근 샘플만 평균에 반영하고, 결과는 반올림합니다."""
        # === Arrange ===
        project = memory_repos.projects.create(models.Project(name="Demo", user_id=caller.user_id))
        web = add_service(memory_repos, project.id, "compute")
        db = add_service(memory_repos, project.id, "database")
        idle = add_service(memory_repos, project.id, "storage")
        add_sample(memory_repos, web.id, cpu=10, age_minutes=30)   # 오래된 샘플: 무시
        add_sample(memory_repos, web.id, cpu=50, memory=20, age_minutes=1)
        add_sample(memory_repos, db.id, cpu=25, memory=41, age_minutes=2)
        assert idle.id  # 샘플이 없는 서비스는 평균에서 제외

        # === Act ===
        usage = overview_service.build_overview(caller)["usage"]

        # === Assert ===
        assert usage["cpu"] == 38        # (50 + 25) / 2 = 37.5
        assert usage["memory"] == 31     # (20 + 41) / 2 = 30.5
        assert usage["database"] == 25

    def test_other_users_projects_are_excluded(self, overview_service, memory_repos, caller, other_caller):
        # === Arrange ===
        mine = memory_repos.projects.create(models.Project(name="Mine", user_id=caller.user_id))
        theirs = memory_repos.projects.create(models.Project(name="Theirs", user_id=other_caller.user_id))
        add_service(memory_repos, mine.id, "compute")
        other = add_service(memory_repos, theirs.id, "compute")
        add_sample(memory_repos, other.id, cpu=90)

        # === Act ===
        overview = overview_service.build_overview(caller)

        # === Assert ===
        assert overview["resources"]["compute"] == 1
        assert overview["usage"]["cpu"] == 0
        assert [p["name"] for p in overview["projects"]] == ["Mine"]

    def test_recent_activities_are_limited(self, overview_service, memory_repos, caller):
        # === Arrange ===
        for i in range(6):
            memory_repos.activities.create(models.Activity(
                type="alert", message=f"alert {i}", user_id=caller.user_id,
                timestamp=utcnow() - timedelta(minutes=10 - i),
            ))

        # === Act ===
        activities = overview_service.build_overview(caller)["recentActivities"]

        # === Assert ===
        assert [a["message"] for a in activities] == ["alert 5", "alert 4", "alert 3", "alert 2"]

    def test_overview_is_idempotent(self, overview_service, memory_repos, caller):
        """쓰기 없이 두 번 호출하면 같은 결과를 반환합니다."""
        # === Arrange ===
        project = memory_repos.projects.create(models.Project(name="Demo", user_id=caller.user_id))
        db = add_service(memory_repos, project.id, "database")
        add_sample(memory_repos, db.id, cpu=33)

        # === Act ===
        first = overview_service.build_overview(caller)
        second = overview_service.build_overview(caller)

        # === Assert ===
        assert first == second

    @pytest.mark.parametrize("value, expected", [(0.5, 1), (1.49, 1), (2.5, 3), (99.5, 100), (0.0, 0)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

# ===================================================================
#  부분 실패(Degradation) 테스트
# ===================================================================
class TestOverviewDegradation:
    def test_usage_failure_degrades_only_usage(self, memory_repos, caller):
        """사용률 조회가 실패해도 나머지 구역은 정상적으로 반환되고 실패가 표시됩니다."""
        # === Arrange ===
        project = memory_repos.projects.create(models.Project(name="Demo", user_id=caller.user_id))
        add_service(memory_repos, project.id, "compute")
        broken_usage = MagicMock()
        broken_usage.find_latest_by_service_id.side_effect = RuntimeError("storage unavailable")
        service = OverviewService(
            memory_repos.projects, memory_repos.services, broken_usage,
            memory_repos.health, memory_repos.activities,
        )

        # === Act ===
        overview = service.build_overview(caller)

        # === Assert ===
        assert overview["degraded"] is True
        assert overview["degradedSections"] == ["usage"]
        assert overview["usage"]["cpu"] == 0
        assert overview["resources"]["compute"] == 1

    def test_every_section_failing_still_returns_overview(self, caller):
        # === Arrange ===
        failing = MagicMock()
        failing.list_by_user_id.side_effect = RuntimeError("down")
        failing.list_all.side_effect = RuntimeError("down")
        failing.list_visible_to.side_effect = RuntimeError("down")
        service = OverviewService(failing, failing, failing, failing, failing)

        # === Act ===
        overview = service.build_overview(caller)

        # === Assert ===
        assert overview["projects"] == []
        assert overview["serviceHealth"] == []
        assert overview["recentActivities"] == []
        assert overview["degradedSections"] == ["projects", "serviceHealth", "recentActivities"]

    def test_failure_hook_runs_once_per_failed_read(self, memory_repos, caller):
        # === Arrange ===
        project = memory_repos.projects.create(models.Project(name="Demo", user_id=caller.user_id))
        add_service(memory_repos, project.id, "compute")
        add_service(memory_repos, project.id, "database")
        broken_usage = MagicMock()
        broken_usage.find_latest_by_service_id.side_effect = RuntimeError("storage unavailable")
        on_failure = MagicMock()
        service = OverviewService(
            memory_repos.projects, memory_repos.services, broken_usage,
            memory_repos.health, memory_repos.activities, on_failure=on_failure,
        )

        # === Act ===
        service.build_overview(caller)

        # === Assert ===
        assert on_failure.call_count == 2

    def test_sql_failure_rolls_back_and_later_sections_still_load(self, db_session, caller):
        """실제 SQL 조회가 실패해도 세션을 되돌린 뒤 나머지 구역은 정상적으로 조회됩니다."""
        # === Arrange ===
        repos = build_sqlalchemy_repositories(db_session)
        project = repos.projects.create(models.Project(name="Demo", user_id=caller.user_id))
        add_service(repos, project.id, "database")
        repos.health.create(models.ServiceHealthStatus(service_type="database", status="operational", uptime=99.9))
        repos.activities.create(models.Activity(type="alert", message="CPU high", user_id=caller.user_id))
        # 시나리오: 사용률 테이블이 사라져 사용률 조회만 실패함
        db_session.execute(text("DROP TABLE resource_usage"))
        db_session.commit()
        rollback = MagicMock(wraps=db_session.rollback)
        service = OverviewService(
            repos.projects, repos.services, repos.usage, repos.health, repos.activities,
            on_failure=rollback,
        )

        # === Act ===
        overview = service.build_overview(caller)

        # === Assert ===
        rollback.assert_called_once()
        assert overview["degradedSections"] == ["usage"]
        assert overview["resources"]["databases"] == 1
        assert [p["name"] for p in overview["projects"]] == ["Demo"]
        assert [h["serviceType"] for h in overview["serviceHealth"]] == ["database"]
        assert [a["message"] for a in overview["recentActivities"]] == ["CPU high"]
