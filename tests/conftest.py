# tests/conftest.py
import io
import json
from wsgiref.util import setup_testing_defaults

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cloudhub.database import Base
from cloudhub.repositories.memory import MemoryRepositoryFactory, build_memory_repositories
from cloudhub.repositories.sqlalchemy import build_sqlalchemy_repositories, SqlalchemyRepositoryFactory
from cloudhub.services.identity_service import IdentityService, CallerContext
from cloudhub.app import create_application

# ===================================================================
#  공용 Fixture
# ===================================================================

@pytest.fixture(autouse=True)
def clear_token_cache():
    """토큰 캐시는 클래스 변수이므로 테스트마다 비웁니다."""
    IdentityService._token_cache.clear()
    yield
    IdentityService._token_cache.clear()

@pytest.fixture
def caller() -> CallerContext:
    return CallerContext(user_id=1, username="alice")

@pytest.fixture
def other_caller() -> CallerContext:
    return CallerContext(user_id=2, username="bob")

@pytest.fixture
def admin_caller() -> CallerContext:
    return CallerContext(user_id=99, username="admin", role="admin")

@pytest.fixture
def sql_session_factory():
    """테스트마다 새로 만드는 SQLite 인메모리 DB의 세션 팩토리."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()

@pytest.fixture
def db_session(sql_session_factory):
    session = sql_session_factory()
    yield session
    session.close()

@pytest.fixture(params=["memory", "sqlalchemy"])
def repos(request):
    """두 저장소 구현에 같은 계약 테스트를 실행하기 위한 리포지토리 묶음."""
    if request.param == "memory":
        return build_memory_repositories()
    return build_sqlalchemy_repositories(request.getfixturevalue("db_session"))

# ===================================================================
#  WSGI 테스트 클라이언트
# ===================================================================

class ApiClient:
    """WSGI 애플리케이션을 직접 호출하고 (상태 코드, JSON 본문)을 돌려줍니다."""

    def __init__(self, app):
        self.app = app
        self.token = None

    def request(self, method, path, body=None, query="", token=None):
        raw = json.dumps(body).encode("utf-8") if body is not None else b""
        environ = {}
        setup_testing_defaults(environ)
        environ.update({
            "REQUEST_METHOD": method,
            "PATH_INFO": path,
            "QUERY_STRING": query,
            "CONTENT_LENGTH": str(len(raw)),
            "wsgi.input": io.BytesIO(raw),
        })
        auth_token = token or self.token
        if auth_token:
            environ["HTTP_X_AUTH_TOKEN"] = auth_token

        captured = {}

        def start_response(status, headers):
            captured["status"] = status

        payload = b"".join(self.app(environ, start_response)).decode("utf-8")
        status_code = int(captured["status"].split()[0])
        return status_code, (json.loads(payload) if payload else None)

    def get(self, path, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path, body=None, **kwargs):
        return self.request("POST", path, body=body, **kwargs)

    def put(self, path, body=None, **kwargs):
        return self.request("PUT", path, body=body, **kwargs)

    def delete(self, path, **kwargs):
        return self.request("DELETE", path, **kwargs)

    def register_and_login(self, username, password="secret123"):
        """사용자를 등록하고 토큰을 발급받아 이후 요청에 사용합니다."""
        status, user = self.post("/api/users", {
            "username": username, "password": password, "displayName": username.title()
        })
        assert status == 201
        status, token = self.post("/api/auth/tokens", {"username": username, "password": password})
        assert status == 201
        self.token = token["token"]
        return user

@pytest.fixture
def repository_factory() -> MemoryRepositoryFactory:
    return MemoryRepositoryFactory()

@pytest.fixture
def client(repository_factory) -> ApiClient:
    return ApiClient(create_application(repository_factory))

@pytest.fixture
def make_client():
    """임의의 리포지토리 팩토리로 테스트 클라이언트를 만드는 헬퍼."""
    def _make(factory) -> ApiClient:
        return ApiClient(create_application(factory))
    return _make

@pytest.fixture(params=["memory", "sqlalchemy"])
def backend_client(request) -> ApiClient:
    """같은 HTTP 시나리오를 두 저장소 구현에 각각 실행하기 위한 클라이언트."""
    if request.param == "memory":
        factory = MemoryRepositoryFactory()
    else:
        factory = SqlalchemyRepositoryFactory(request.getfixturevalue("sql_session_factory"))
    return ApiClient(create_application(factory))
