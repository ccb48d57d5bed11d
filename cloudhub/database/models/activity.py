from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from ..database import Base, utcnow

class Activity(Base):
    """
    감사 로그(activity log) 항목입니다.
    사용자/프로젝트/서비스와는 느슨하게 연결되며, 대상이 삭제되어도 기록은 남습니다.
    """
    __tablename__ = "activities"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False)
    message = Column(String, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
