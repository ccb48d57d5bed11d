from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from ..database import Base, utcnow

class Project(Base):
    """
    한 사용자가 소유하는 서비스들의 묶음입니다.
    개발 단계(status)와 월 예상 비용을 가지며, 모든 Service는 하나의 Project에 속합니다.
    """
    __tablename__ = "projects"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    status = Column(String, nullable=False, default="development")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_deployed = Column(DateTime, nullable=True)
    cost_per_month = Column(Float, nullable=False, default=0.0)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
