from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from cloudhub.config import settings

# 데이터베이스 연결 문자열은 설정(DATABASE_URL)에서 읽어옵니다.
# 기본값은 프로젝트 루트의 SQLite 파일이며, PostgreSQL 접속 문자열도 그대로 사용할 수 있습니다.
SQLALCHEMY_DATABASE_URL = settings.database_url


def build_engine(database_url: str):
    """
    접속 문자열에 맞는 SQLAlchemy 엔진을 생성합니다.
    connect_args의 check_same_thread는 SQLite에서만 필요합니다.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


engine = build_engine(SQLALCHEMY_DATABASE_URL)

# autocommit=False, autoflush=False로 설정하여, 명시적으로 commit을 호출해야 DB에 반영됩니다.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()


def utcnow() -> datetime:
    """타임존 정보를 뗀 UTC 현재 시각. 모든 타임스탬프는 이 형식으로 저장합니다."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
