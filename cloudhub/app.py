# cloudhub/app.py
from wsgiref.simple_server import make_server
from urllib.parse import parse_qs
import json
import logging
import re

from cloudhub import __version__
from cloudhub.config import settings, Settings
from cloudhub.logging_config import setup_logging
from cloudhub.schemas import (
    parse_payload, UserCreate, UserUpdate, TokenRequest, ProjectCreate, ProjectUpdate,
    ServiceCreate, ServiceUpdate, ResourceUsageCreate, ActivityCreate, ServiceHealthUpsert
)
from cloudhub.services.identity_service import IdentityService, CallerContext
from cloudhub.services.project_service import ProjectService
from cloudhub.services.provisioning_service import ProvisioningService
from cloudhub.services.activity_service import ActivityService
from cloudhub.services.health_service import HealthService
from cloudhub.services.overview_service import OverviewService
from cloudhub.services.exceptions import *

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# 경로의 ID는 최대 9자리까지만 받습니다. (32비트 INTEGER 컬럼 범위 안)
# 더 긴 숫자는 어떤 레코드와도 일치할 수 없으므로 라우팅 단계에서 404로 처리됩니다.
ID = r"([0-9]{1,9})"

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        return json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise ValueError("Invalid or missing JSON body.")

def get_query_limit(environ, default=DEFAULT_LIMIT):
    """쿼리 문자열의 limit 값을 읽습니다. 없으면 default를 반환합니다."""
    values = parse_qs(environ.get("QUERY_STRING", "")).get("limit")
    if not values:
        return default
    try:
        limit = int(values[0])
    except ValueError:
        raise RequestValidationError([{"path": "limit", "message": "limit must be an integer"}])
    if not 1 <= limit <= MAX_LIMIT:
        raise RequestValidationError([{"path": "limit", "message": f"limit must be between 1 and {MAX_LIMIT}"}])
    return limit

def get_auth_token(environ):
    auth_token = environ.get('HTTP_X_AUTH_TOKEN')
    if not auth_token:
        raise TokenInvalidError("Missing 'X-Auth-Token' header.")
    return auth_token

def authorize(environ) -> CallerContext:
    identity_service = environ['services']['identity']
    return identity_service.validate_token(get_auth_token(environ))

def handle_exception(e):
    error_map = {
        TokenInvalidError: "401 Unauthorized",
        AuthenticationError: "401 Unauthorized",
        AccessDeniedError: "403 Forbidden",
        UserNotFoundError: "404 Not Found",
        ProjectNotFoundError: "404 Not Found",
        ServiceNotFoundError: "404 Not Found",
        ServiceHealthNotFoundError: "404 Not Found",
        RequestValidationError: "400 Bad Request",
        ValueError: "400 Bad Request",
        UserCreationError: "400 Bad Request",
    }
    status = error_map.get(type(e))
    if status is None:
        logger.exception("Unhandled error while processing request")
        return "500 Internal Server Error", json.dumps({"error": "Internal server error"})

    body = {"error": str(e)}
    if isinstance(e, RequestValidationError):
        body["details"] = e.errors
    return status, json.dumps(body)

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def build_services(repos, token_ttl_minutes=60, activity_limit=4):
    """요청 하나에서 사용할 서비스 객체들을 리포지토리 묶음으로부터 생성합니다."""
    return {
        'identity': IdentityService(repos.users, token_ttl_minutes),
        'projects': ProjectService(repos.projects, repos.services, repos.usage, repos.activities),
        'provisioning': ProvisioningService(repos.projects, repos.services, repos.usage, repos.activities),
        'activities': ActivityService(repos.activities, repos.users, repos.projects, repos.services),
        'health': HealthService(repos.health),
        'overview': OverviewService(
            repos.projects, repos.services, repos.usage, repos.health, repos.activities,
            activity_limit=activity_limit,
            on_failure=repos.rollback,
        ),
    }

def create_application(repository_factory, token_ttl_minutes=60, activity_limit=4):
    """
    WSGI 애플리케이션을 생성합니다.

    Args:
        repository_factory: open()으로 요청마다 리포지토리 묶음을 여는 팩토리.
            (SqlalchemyRepositoryFactory 또는 MemoryRepositoryFactory)
        token_ttl_minutes: 발급 토큰의 유효 시간(분).
        activity_limit: overview에 포함할 최근 활동 수.
    """
    def application(environ, start_response):
        path = environ.get("PATH_INFO", "")
        method = environ.get("REQUEST_METHOD", "")
        try:
            with repository_factory.open() as repos:
                # 1. 의존성 생성 (Repositories -> Services) 후 environ을 통해 핸들러에 전달
                environ['services'] = build_services(repos, token_ttl_minutes, activity_limit)

                # 2. 라우팅 및 핸들러 실행
                handler, path_args = None, []
                for route_method, pattern, route_handler in routes:
                    if method == route_method and (match := re.match(pattern, path)):
                        handler, path_args = route_handler, match.groups()
                        break

                if handler:
                    status, response_body = handler(environ, *path_args)
                else:
                    status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            status, response_body = handle_exception(e)

        logger.info("%s %s -> %s", method, path, status)
        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

# --- 인증 / 사용자 ---

def health_check_handler(environ, *args):
    return '200 OK', json.dumps({"status": "ok", "version": __version__})

def auth_tokens_handler(environ, *args):
    data = parse_payload(TokenRequest, get_request_data(environ))
    token = environ['services']['identity'].authenticate(data.username, data.password)
    return '201 Created', json.dumps(token)

def revoke_token_handler(environ, *args):
    authorize(environ)
    environ['services']['identity'].revoke_token(get_auth_token(environ))
    return '204 No Content', ''

def create_user_handler(environ, *args):
    data = parse_payload(UserCreate, get_request_data(environ))
    user = environ['services']['identity'].create_user(data)
    return '201 Created', json.dumps(user)

def me_handler(environ, *args):
    caller = authorize(environ)
    user = environ['services']['identity'].get_user(caller.user_id)
    return '200 OK', json.dumps(user)

def get_user_handler(environ, user_id):
    authorize(environ)
    user = environ['services']['identity'].get_user(int(user_id))
    return '200 OK', json.dumps(user)

def update_user_handler(environ, user_id):
    caller = authorize(environ)
    data = parse_payload(UserUpdate, get_request_data(environ))
    user = environ['services']['identity'].update_user(caller, int(user_id), data)
    return '200 OK', json.dumps(user)

# --- 프로젝트 ---

def list_projects_handler(environ, *args):
    caller = authorize(environ)
    projects = environ['services']['projects'].list_projects(caller)
    return '200 OK', json.dumps(projects)

def get_project_handler(environ, project_id):
    caller = authorize(environ)
    project = environ['services']['projects'].get_project(caller, int(project_id))
    return '200 OK', json.dumps(project)

def create_project_handler(environ, *args):
    caller = authorize(environ)
    data = parse_payload(ProjectCreate, get_request_data(environ))
    project = environ['services']['projects'].create_project(caller, data)
    return '201 Created', json.dumps(project)

def update_project_handler(environ, project_id):
    caller = authorize(environ)
    data = parse_payload(ProjectUpdate, get_request_data(environ))
    project = environ['services']['projects'].update_project(caller, int(project_id), data)
    return '200 OK', json.dumps(project)

def delete_project_handler(environ, project_id):
    caller = authorize(environ)
    environ['services']['projects'].delete_project(caller, int(project_id))
    return '204 No Content', ''

# --- 서비스 / 사용률 ---

def list_services_handler(environ, project_id):
    caller = authorize(environ)
    services = environ['services']['provisioning'].list_services(caller, int(project_id))
    return '200 OK', json.dumps(services)

def get_service_handler(environ, service_id):
    caller = authorize(environ)
    service = environ['services']['provisioning'].get_service(caller, int(service_id))
    return '200 OK', json.dumps(service)

def create_service_handler(environ, *args):
    caller = authorize(environ)
    data = parse_payload(ServiceCreate, get_request_data(environ))
    service = environ['services']['provisioning'].create_service(caller, data)
    return '201 Created', json.dumps(service)

def update_service_handler(environ, service_id):
    caller = authorize(environ)
    data = parse_payload(ServiceUpdate, get_request_data(environ))
    service = environ['services']['provisioning'].update_service(caller, int(service_id), data)
    return '200 OK', json.dumps(service)

def delete_service_handler(environ, service_id):
    caller = authorize(environ)
    environ['services']['provisioning'].delete_service(caller, int(service_id))
    return '204 No Content', ''

def list_usage_handler(environ, service_id):
    caller = authorize(environ)
    limit = get_query_limit(environ, default=None)
    usage = environ['services']['provisioning'].list_usage(caller, int(service_id), limit)
    return '200 OK', json.dumps(usage)

def record_usage_handler(environ, *args):
    caller = authorize(environ)
    data = parse_payload(ResourceUsageCreate, get_request_data(environ))
    usage = environ['services']['provisioning'].record_usage(caller, data)
    return '201 Created', json.dumps(usage)

# --- 활동 기록 ---

def list_activities_handler(environ, *args):
    caller = authorize(environ)
    activities = environ['services']['activities'].list_recent(caller, get_query_limit(environ))
    return '200 OK', json.dumps(activities)

def list_user_activities_handler(environ, user_id):
    caller = authorize(environ)
    activities = environ['services']['activities'].list_for_user(caller, int(user_id), get_query_limit(environ))
    return '200 OK', json.dumps(activities)

def list_project_activities_handler(environ, project_id):
    caller = authorize(environ)
    activities = environ['services']['activities'].list_for_project(
        caller, int(project_id), get_query_limit(environ)
    )
    return '200 OK', json.dumps(activities)

def create_activity_handler(environ, *args):
    caller = authorize(environ)
    data = parse_payload(ActivityCreate, get_request_data(environ))
    activity = environ['services']['activities'].create_activity(caller, data)
    return '201 Created', json.dumps(activity)

# --- 서비스 상태 보드 / 개요 ---

def list_service_health_handler(environ, *args):
    authorize(environ)
    return '200 OK', json.dumps(environ['services']['health'].list_statuses())

def get_service_health_handler(environ, service_type):
    authorize(environ)
    return '200 OK', json.dumps(environ['services']['health'].get_status(service_type))

def upsert_service_health_handler(environ, service_type):
    caller = authorize(environ)
    data = parse_payload(ServiceHealthUpsert, get_request_data(environ))
    status = environ['services']['health'].upsert_status(caller, service_type, data)
    return '200 OK', json.dumps(status)

def overview_handler(environ, *args):
    caller = authorize(environ)
    return '200 OK', json.dumps(environ['services']['overview'].build_overview(caller))

routes = [
    ('GET', r'^/api/health$', health_check_handler),
    ('POST', r'^/api/auth/tokens$', auth_tokens_handler),
    ('DELETE', r'^/api/auth/tokens$', revoke_token_handler),
    ('POST', r'^/api/users$', create_user_handler),
    ('GET', r'^/api/me$', me_handler),
    ('GET', rf'^/api/user/{ID}$', get_user_handler),
    ('PUT', rf'^/api/user/{ID}$', update_user_handler),
    ('GET', r'^/api/projects$', list_projects_handler),
    ('POST', r'^/api/projects$', create_project_handler),
    ('GET', rf'^/api/projects/{ID}$', get_project_handler),
    ('PUT', rf'^/api/projects/{ID}$', update_project_handler),
    ('DELETE', rf'^/api/projects/{ID}$', delete_project_handler),
    ('GET', rf'^/api/projects/{ID}/services$', list_services_handler),
    ('GET', rf'^/api/projects/{ID}/activities$', list_project_activities_handler),
    ('POST', r'^/api/services$', create_service_handler),
    ('GET', rf'^/api/services/{ID}$', get_service_handler),
    ('PUT', rf'^/api/services/{ID}$', update_service_handler),
    ('DELETE', rf'^/api/services/{ID}$', delete_service_handler),
    ('GET', rf'^/api/services/{ID}/usage$', list_usage_handler),
    ('POST', r'^/api/resource-usage$', record_usage_handler),
    ('GET', r'^/api/activities$', list_activities_handler),
    ('POST', r'^/api/activities$', create_activity_handler),
    ('GET', rf'^/api/users/{ID}/activities$', list_user_activities_handler),
    ('GET', r'^/api/service-health$', list_service_health_handler),
    ('GET', r'^/api/service-health/([a-z0-9_]+)$', get_service_health_handler),
    ('PUT', r'^/api/service-health/([a-z0-9_]+)$', upsert_service_health_handler),
    ('GET', r'^/api/overview$', overview_handler),
]

# --------------------------------------------------------------------------
## 저장소 선택 및 서버 실행
# --------------------------------------------------------------------------

def build_repository_factory(app_settings: Settings):
    """
    설정에 맞는 리포지토리 팩토리를 생성하고, 필요하면 데모 데이터를 삽입합니다.

    Raises:
        ValueError: STORAGE_BACKEND가 'sql'도 'memory'도 아닐 때.
    """
    from cloudhub.database.db_init import initialize_db, seed_demo_data

    if app_settings.storage_backend == "memory":
        from cloudhub.repositories.memory import MemoryRepositoryFactory
        factory = MemoryRepositoryFactory()
    elif app_settings.storage_backend == "sql":
        from cloudhub.database import SessionLocal
        from cloudhub.repositories.sqlalchemy import SqlalchemyRepositoryFactory
        initialize_db()
        factory = SqlalchemyRepositoryFactory(SessionLocal)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND '{app_settings.storage_backend}' (expected 'sql' or 'memory').")

    if app_settings.seed_demo_data:
        with factory.open() as repos:
            seed_demo_data(repos)
    logger.info("Using '%s' storage backend", app_settings.storage_backend)
    return factory

_default_application = None

def application(environ, start_response):
    """설정(환경 변수) 기반의 기본 WSGI 진입점. 첫 요청에서 저장소를 초기화합니다."""
    global _default_application
    if _default_application is None:
        _default_application = create_application(
            build_repository_factory(settings),
            token_ttl_minutes=settings.token_ttl_minutes,
            activity_limit=settings.overview_activity_limit,
        )
    return _default_application(environ, start_response)

def main():
    setup_logging(settings.log_level, settings.log_file or None)
    wsgi_app = create_application(
        build_repository_factory(settings),
        token_ttl_minutes=settings.token_ttl_minutes,
        activity_limit=settings.overview_activity_limit,
    )
    try:
        with make_server(settings.host, settings.port, wsgi_app) as httpd:
            logger.info("Serving CloudHub API on %s:%s...", settings.host or "0.0.0.0", settings.port)
            httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server stopped.")

if __name__ == "__main__":
    main()
