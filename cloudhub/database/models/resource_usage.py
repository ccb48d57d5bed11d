from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from ..database import Base, utcnow

class ResourceUsage(Base):
    """
    특정 서비스의 한 시점 자원 사용률(%) 샘플입니다.
    추가만 가능하며 수정되지 않습니다.
    """
    __tablename__ = "resource_usage"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    cpu_usage = Column(Float, nullable=False, default=0.0)
    memory_usage = Column(Float, nullable=False, default=0.0)
    storage_usage = Column(Float, nullable=False, default=0.0)
    network_usage = Column(Float, nullable=False, default=0.0)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
