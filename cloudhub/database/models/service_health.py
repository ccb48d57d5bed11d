from sqlalchemy import Column, Integer, String, Float, DateTime
from ..database import Base, utcnow

class ServiceHealthStatus(Base):
    """
    서비스 타입별 상태 보드 항목입니다. (개별 Service 인스턴스가 아닌 타입 단위)
    service_type이 자연 키이며, 타입마다 하나의 레코드만 존재합니다.
    """
    __tablename__ = "service_health"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    service_type = Column(String, unique=True, nullable=False, index=True)
    status = Column(String, nullable=False, default="operational")
    uptime = Column(Float, nullable=False, default=100.0)
    last_updated = Column(DateTime, nullable=False, default=utcnow)
