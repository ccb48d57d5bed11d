# cloudhub/database/db_init.py
import logging
from datetime import timedelta

from .database import engine, Base, utcnow
from . import models
from cloudhub.repositories import RepositoryBundle
from cloudhub.services.identity_service import hash_password

logger = logging.getLogger(__name__)

# 상태 보드에 미리 등록하는 서비스 타입
HEALTH_BOARD_TYPES = ("database", "compute", "storage", "functions", "network", "web3", "spatial", "3d_amp")


def initialize_db():
    """모든 테이블을 생성합니다. (이미 존재하면 생성하지 않음)"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))


def seed_demo_data(repos: RepositoryBundle) -> bool:
    """
    데모용 기본 데이터를 삽입합니다. SQL/인메모리 저장소 모두 리포지토리만 사용합니다.

    사용자가 한 명이라도 있으면 아무것도 하지 않고 False를 반환합니다.
    """
    if repos.users.list_all():
        logger.info("Demo data already present; skipping seed.")
        return False

    admin = repos.users.create(models.User(
        username="admin",
        password_hash=hash_password("adminpass"),
        display_name="Admin User",
        role="admin",
    ))

    now = utcnow()
    ecommerce = repos.projects.create(models.Project(
        name="E-commerce Platform",
        status="production",
        cost_per_month=129.99,
        last_deployed=now - timedelta(days=2),
        user_id=admin.id,
    ))
    analytics = repos.projects.create(models.Project(
        name="Analytics Dashboard",
        status="development",
        cost_per_month=79.50,
        user_id=admin.id,
    ))

    services = [
        ("Product Database", "database", ecommerce, {"engine": "postgres", "size": "medium", "replicas": 1}),
        ("Web Server", "compute", ecommerce, {"cpu": 2, "memory": "4GB", "scaling": "auto"}),
        ("Customer Data Store", "storage", ecommerce, {"type": "object", "redundancy": "high"}),
        ("User Authentication", "web3", ecommerce, {"provider": "oasis", "features": ["identity", "wallet"]}),
        ("Product Visualization", "3d_amp", analytics, {"renderer": "webgl", "quality": "high"}),
        ("Store Locator", "spatial", analytics, {"provider": "mapbox", "features": ["routing", "geocoding"]}),
    ]
    created_services = {}
    for name, service_type, project, config in services:
        created_services[name] = repos.services.create(models.Service(
            name=name,
            type=service_type,
            status="active",
            config=config,
            project_id=project.id,
        ))

    for service_type in HEALTH_BOARD_TYPES:
        repos.health.create(models.ServiceHealthStatus(
            service_type=service_type,
            status="operational",
            uptime=99.98,
        ))

    activities = [
        ("project_created", "E-commerce Platform project created", ecommerce.id, None, timedelta(days=7)),
        ("deployment", "E-commerce Platform deployed to production", ecommerce.id, None, timedelta(days=2)),
        ("alert", "High CPU usage on Web Server", ecommerce.id,
         created_services["Web Server"].id, timedelta(hours=3)),
    ]
    for activity_type, message, project_id, service_id, age in activities:
        repos.activities.create(models.Activity(
            type=activity_type,
            message=message,
            user_id=admin.id,
            project_id=project_id,
            service_id=service_id,
            timestamp=now - age,
        ))

    logger.info(
        "Demo data seeded for '%s': %s service(s), %s health record(s)",
        admin.username, len(created_services), len(HEALTH_BOARD_TYPES),
    )
    return True
