from typing import Literal, Optional

from pydantic import Field, field_validator

from .base import CamelModel

UserRole = Literal["user", "admin"]


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=6, max_length=128)
    display_name: str = Field(..., min_length=1, max_length=100)
    avatar: Optional[str] = Field(None, max_length=500)


class UserUpdate(CamelModel):
    """
    프로필 필드만 수정할 수 있습니다. role은 관리자만 바꿀 수 있습니다.
    avatar는 null로 비울 수 있지만, displayName과 role은 null을 허용하지 않습니다.
    """
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    avatar: Optional[str] = Field(None, max_length=500)
    role: Optional[UserRole] = None

    @field_validator("display_name", "role")
    @classmethod
    def reject_null(cls, value):
        # 생략된 필드에는 실행되지 않고, 명시적으로 보낸 값에만 실행됩니다.
        if value is None:
            raise ValueError("must not be null")
        return value


class TokenRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
