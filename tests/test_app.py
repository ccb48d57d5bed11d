# tests/test_app.py
"""WSGI 애플리케이션을 끝까지 호출하는 시나리오 테스트. 기본은 인메모리 저장소, TestBackendParity는 두 구현 모두에서 실행합니다."""
import logging

import pytest

from cloudhub.config import Settings
from cloudhub.app import build_repository_factory, handle_exception
from cloudhub.repositories.memory import MemoryRepositoryFactory


@pytest.fixture
def alice(client):
    user = client.register_and_login("alice")
    return user, client.token


@pytest.fixture
def bob(client, alice):
    # alice 토큰을 기본값으로 유지하기 위해 등록 후 되돌려 놓습니다.
    alice_token = client.token
    user = client.register_and_login("bob")
    bob_token = client.token
    client.token = alice_token
    return user, bob_token


def create_project(client, name="Demo", **extra):
    status, project = client.post("/api/projects", {"name": name, **extra})
    assert status == 201
    return project


def create_service(client, project_id, service_type="database", config=None):
    status, service = client.post("/api/services", {
        "name": f"{service_type} service",
        "type": service_type,
        "projectId": project_id,
        "config": config if config is not None else {"engine": "postgres", "size": "small", "replicas": 1},
    })
    assert status == 201
    return service


# ===================================================================
#  인증(Authentication)
# ===================================================================
class TestAuthentication:
    def test_requests_without_token_are_unauthorized(self, client):
        status, body = client.get("/api/projects")
        assert status == 401
        assert "X-Auth-Token" in body["error"]

    def test_invalid_token_is_unauthorized(self, client):
        status, _ = client.get("/api/overview", token="not-a-token")
        assert status == 401

    def test_wrong_password(self, client, alice):
        status, body = client.post("/api/auth/tokens", {"username": "alice", "password": "nope-nope"})
        assert status == 401
        assert body == {"error": "Invalid username or password."}

    def test_me_and_logout(self, client, alice):
        # === Act ===
        status, me = client.get("/api/me")

        # === Assert ===
        assert status == 200
        assert me["username"] == "alice"
        assert "passwordHash" not in me

        assert client.delete("/api/auth/tokens") == (204, None)
        assert client.get("/api/me")[0] == 401

    def test_duplicate_username(self, client, alice):
        status, body = client.post("/api/users", {"username": "alice", "password": "secret123", "displayName": "A"})
        assert status == 400
        assert "already exists" in body["error"]

    def test_health_endpoint_is_public(self, client):
        status, body = client.get("/api/health")
        assert status == 200
        assert body["status"] == "ok"


# ===================================================================
#  프로젝트 / 소유권
# ===================================================================
class TestProjects:
    def test_create_project_records_activity(self, client, alice):
        """프로젝트를 만들면 양의 ID가 부여되고 이름이 들어간 'project_created' 활동이 기록됩니다."""
        # === Act ===
        project = create_project(client, "Demo")

        # === Assert ===
        assert project["id"] > 0
        status, activities = client.get("/api/activities")
        assert status == 200
        assert activities[0]["type"] == "project_created"
        assert "Demo" in activities[0]["message"]
        assert activities[0]["projectId"] == project["id"]

    def test_forbidden_versus_not_found(self, client, alice, bob):
        """다른 사용자의 프로젝트는 403, 존재하지 않는 프로젝트는 404입니다."""
        # === Arrange ===
        _, bob_token = bob
        project = create_project(client, "Alice's")

        # === Act & Assert ===
        assert client.get(f"/api/projects/{project['id']}", token=bob_token)[0] == 403
        assert client.put(f"/api/projects/{project['id']}", {"name": "x"}, token=bob_token)[0] == 403
        assert client.delete(f"/api/projects/{project['id']}", token=bob_token)[0] == 403
        assert client.get("/api/projects/9999", token=bob_token)[0] == 404

    def test_projects_are_scoped_to_caller(self, client, alice, bob):
        # === Arrange ===
        _, bob_token = bob
        create_project(client, "Alice's")

        # === Act ===
        status, projects = client.get("/api/projects", token=bob_token)

        # === Assert ===
        assert status == 200
        assert projects == []

    def test_promotion_to_production(self, client, alice):
        # === Arrange ===
        project = create_project(client)

        # === Act ===
        status, updated = client.put(f"/api/projects/{project['id']}", {"status": "production"})

        # === Assert ===
        assert status == 200
        assert updated["lastDeployed"] is not None
        _, activities = client.get(f"/api/projects/{project['id']}/activities")
        assert activities[0]["type"] == "deployment"

    def test_delete_project_cascades(self, client, alice):
        # === Arrange ===
        project = create_project(client)
        service = create_service(client, project["id"])

        # === Act ===
        status, body = client.delete(f"/api/projects/{project['id']}")

        # === Assert ===
        assert (status, body) == (204, None)
        assert client.get(f"/api/projects/{project['id']}")[0] == 404
        assert client.get(f"/api/services/{service['id']}")[0] == 404
        _, activities = client.get("/api/activities")
        assert activities[0]["type"] == "project_deleted"
        assert all(a["projectId"] is None for a in activities)


# ===================================================================
#  서비스 / 사용률
# ===================================================================
class TestServices:
    def test_service_config_round_trips(self, client, alice):
        # === Arrange ===
        project = create_project(client)
        config = {"provider": "mapbox", "features": ["routing", "geocoding"]}

        # === Act ===
        service = create_service(client, project["id"], "spatial", config)

        # === Assert ===
        status, fetched = client.get(f"/api/services/{service['id']}")
        assert status == 200
        assert fetched["config"] == config
        _, listed = client.get(f"/api/projects/{project['id']}/services")
        assert [s["id"] for s in listed] == [service["id"]]

    def test_delete_service_then_get_is_not_found(self, client, alice):
        # === Arrange ===
        service = create_service(client, create_project(client)["id"])

        # === Act ===
        status, body = client.delete(f"/api/services/{service['id']}")

        # === Assert ===
        assert (status, body) == (204, None)
        assert client.get(f"/api/services/{service['id']}")[0] == 404

    def test_service_in_other_users_project_is_forbidden(self, client, alice, bob):
        # === Arrange ===
        _, bob_token = bob
        service = create_service(client, create_project(client)["id"])

        # === Act & Assert ===
        assert client.get(f"/api/services/{service['id']}", token=bob_token)[0] == 403
        assert client.get(f"/api/services/{service['id']}/usage", token=bob_token)[0] == 403
        assert client.delete(f"/api/services/{service['id']}", token=bob_token)[0] == 403

    def test_invalid_config_returns_validation_details(self, client, alice):
        # === Arrange ===
        project = create_project(client)

        # === Act ===
        status, body = client.post("/api/services", {
            "name": "vm", "type": "compute", "projectId": project["id"], "config": {"cpu": 0, "gpu": True},
        })

        # === Assert ===
        assert status == 400
        assert body["error"] == "Validation failed"
        assert {d["path"] for d in body["details"]} == {"config.cpu", "config.gpu"}

    def test_usage_for_missing_service_is_rejected_and_ignored(self, client, alice):
        """존재하지 않는 서비스의 샘플은 404로 거부되고 overview 평균에 영향을 주지 않습니다."""
        # === Arrange ===
        service = create_service(client, create_project(client)["id"])
        assert client.post("/api/resource-usage", {"serviceId": service["id"], "cpuUsage": 40})[0] == 201
        _, before = client.get("/api/overview")

        # === Act ===
        status, _ = client.post("/api/resource-usage", {"serviceId": 9999, "cpuUsage": 100})

        # === Assert ===
        assert status == 404
        _, after = client.get("/api/overview")
        assert after["usage"] == before["usage"]
        assert after["usage"]["cpu"] == 40

    def test_usage_list_is_newest_first(self, client, alice):
        # === Arrange ===
        service = create_service(client, create_project(client)["id"])
        for cpu, ts in ((10, "2024-01-01T00:00:00Z"), (30, "2024-01-03T00:00:00Z"), (20, "2024-01-02T00:00:00Z")):
            client.post("/api/resource-usage", {"serviceId": service["id"], "cpuUsage": cpu, "timestamp": ts})

        # === Act ===
        status, samples = client.get(f"/api/services/{service['id']}/usage", query="limit=2")

        # === Assert ===
        assert status == 200
        assert [s["cpuUsage"] for s in samples] == [30, 20]


# ===================================================================
#  활동 기록 / 상태 보드 / 개요
# ===================================================================
class TestActivitiesAndHealth:
    def test_limit_validation(self, client, alice):
        assert client.get("/api/activities", query="limit=0")[0] == 400
        assert client.get("/api/activities", query="limit=abc")[0] == 400
        status, body = client.get("/api/activities", query="limit=101")
        assert status == 400
        assert body["details"][0]["path"] == "limit"

    def test_other_users_activity_feed_is_forbidden(self, client, alice, bob):
        bob_user, _ = bob
        assert client.get(f"/api/users/{bob_user['id']}/activities")[0] == 403
        assert client.get("/api/users/9999/activities")[0] == 404

    def test_post_activity(self, client, alice):
        # === Act ===
        status, activity = client.post("/api/activities", {"type": "alert", "message": "Disk almost full"})

        # === Assert ===
        assert status == 201
        assert activity["userId"] == alice[0]["id"]

    def test_health_upsert_requires_admin(self, client, alice):
        status, _ = client.put("/api/service-health/compute", {"status": "outage"})
        assert status == 403
        assert client.get("/api/service-health/compute")[0] == 404

    def test_overview_shape(self, client, alice):
        # === Arrange ===
        project = create_project(client)
        create_service(client, project["id"], "database")

        # === Act ===
        status, overview = client.get("/api/overview")

        # === Assert ===
        assert status == 200
        assert overview["resources"]["databases"] == 1
        assert overview["resources"]["deployments"] == {"total": 1, "healthy": 1}
        assert len(overview["recentActivities"]) <= 4
        assert overview["degraded"] is False
        assert client.get("/api/overview")[1] == overview


# ===================================================================
#  라우팅 / 오류 처리
# ===================================================================
class TestErrorHandling:
    def test_unknown_route(self, client):
        assert client.get("/api/nothing-here") == (404, {"error": "Not Found"})

    def test_missing_body_fails_validation(self, client, alice):
        status, body = client.request("POST", "/api/projects", body=None)
        # 본문이 없으면 빈 객체로 취급되어 필드 검증 오류가 됩니다.
        assert status == 400
        assert body["details"][0]["path"] == "name"

    def test_unexpected_error_is_hidden(self, caplog):
        """예상하지 못한 예외는 500과 일반 메시지로 응답하고, 상세 내용은 로그에만 남깁니다."""
        with caplog.at_level(logging.ERROR):
            try:
                raise RuntimeError("database password is hunter2")
            except RuntimeError as e:
                status, body = handle_exception(e)

        assert status == "500 Internal Server Error"
        assert "hunter2" not in body
        assert "Internal server error" in body
        assert "hunter2" in caplog.text


# ===================================================================
#  저장소 선택 및 데모 데이터
# ===================================================================
class TestRepositoryFactory:
    def test_memory_backend_with_demo_data(self, make_client):
        # === Arrange ===
        settings = Settings(storage_backend="memory", seed_demo_data=True)

        # === Act ===
        factory = build_repository_factory(settings)
        client = make_client(factory)
        status, token = client.post("/api/auth/tokens", {"username": "admin", "password": "adminpass"})

        # === Assert ===
        assert isinstance(factory, MemoryRepositoryFactory)
        assert status == 201
        client.token = token["token"]
        _, projects = client.get("/api/projects")
        assert {p["name"] for p in projects} == {"E-commerce Platform", "Analytics Dashboard"}
        _, health = client.get("/api/service-health")
        assert len(health) == 8
        _, overview = client.get("/api/overview")
        assert overview["resources"]["databases"] == 1
        assert overview["resources"]["spatial"] == 1
        status, upserted = client.put("/api/service-health/compute", {"status": "degraded", "uptime": 97.5})
        assert status == 200
        assert upserted["status"] == "degraded"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_repository_factory(Settings(storage_backend="cassandra", seed_demo_data=False))


# ===================================================================
#  두 저장소 구현에서 같은 응답을 보장하는 시나리오
# ===================================================================
class TestBackendParity:
    @pytest.mark.parametrize("field", ["displayName", "role"])
    def test_null_profile_field_is_rejected(self, backend_client, field):
        """NOT NULL 필드를 null로 보내면 저장 전에 400으로 거부되고 기존 값이 유지됩니다."""
        # === Arrange ===
        user = backend_client.register_and_login("alice")

        # === Act ===
        status, body = backend_client.put(f"/api/user/{user['id']}", {field: None})

        # === Assert ===
        assert status == 400
        assert body["details"][0]["path"] == field
        _, me = backend_client.get("/api/me")
        assert me["displayName"] == "Alice"
        assert me["role"] == "user"

    def test_avatar_can_be_cleared(self, backend_client):
        # === Arrange ===
        user = backend_client.register_and_login("alice")
        backend_client.put(f"/api/user/{user['id']}", {"avatar": "https://example.com/a.png"})

        # === Act ===
        status, updated = backend_client.put(f"/api/user/{user['id']}", {"avatar": None})

        # === Assert ===
        assert status == 200
        assert updated["avatar"] is None

    @pytest.mark.parametrize("path", [
        "/api/projects/99999999999999999999999",
        "/api/services/99999999999999999999999",
        "/api/services/99999999999999999999999/usage",
        "/api/user/99999999999999999999999",
    ])
    def test_oversized_path_id_is_not_found(self, backend_client, path):
        # === Arrange ===
        backend_client.register_and_login("alice")

        # === Act ===
        status, _ = backend_client.get(path)

        # === Assert ===
        assert status == 404

    def test_oversized_body_id_is_rejected(self, backend_client):
        # === Arrange ===
        backend_client.register_and_login("alice")

        # === Act ===
        status, body = backend_client.post("/api/resource-usage", {"serviceId": 10 ** 23, "cpuUsage": 5})

        # === Assert ===
        assert status == 400
        assert body["details"][0]["path"] == "serviceId"

    def test_activity_with_mismatched_service_and_project(self, backend_client):
        """serviceId의 서비스가 projectId의 프로젝트에 속하지 않으면 400입니다."""
        # === Arrange ===
        backend_client.register_and_login("alice")
        first = create_project(backend_client, "First")
        second = create_project(backend_client, "Second")
        service = create_service(backend_client, first["id"])

        # === Act ===
        status, body = backend_client.post("/api/activities", {
            "type": "alert", "message": "x", "projectId": second["id"], "serviceId": service["id"],
        })

        # === Assert ===
        assert status == 400
        assert body["details"][0]["path"] == "serviceId"


class TestRoleChanges:
    def test_demoted_admin_loses_rights_with_existing_token(self, client, repository_factory):
        """역할이 바뀌면 이미 발급된 토큰에도 즉시 반영됩니다."""
        # === Arrange ===
        user = client.register_and_login("alice")
        with repository_factory.open() as repos:
            repos.users.update(user["id"], {"role": "admin"})
        assert client.put("/api/service-health/compute", {"status": "operational"})[0] == 200

        # === Act ===
        with repository_factory.open() as repos:
            repos.users.update(user["id"], {"role": "user"})
        status, _ = client.put("/api/service-health/compute", {"status": "outage"})

        # === Assert ===
        assert status == 403
