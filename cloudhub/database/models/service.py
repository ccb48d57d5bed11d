from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey
from ..database import Base, utcnow

class Service(Base):
    """
    프로젝트 안에 프로비저닝된 클라우드 리소스(compute, database, storage 등)를 나타냅니다.
    config는 타입별 설정 문서이며, 요청에서 받은 그대로 저장됩니다.
    """
    __tablename__ = "services"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="active")
    config = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
