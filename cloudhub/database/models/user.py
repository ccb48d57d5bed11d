from sqlalchemy import Column, Integer, String
from ..database import Base

class User(Base):
    """
    시스템에 로그인하고 프로젝트를 소유할 수 있는 사용자를 나타냅니다.
    사용자는 0개 이상의 프로젝트를 소유하며, 비밀번호는 해시로만 저장됩니다.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")
