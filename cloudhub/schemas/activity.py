from typing import Optional

from pydantic import Field

from .base import CamelModel, MAX_ID


class ActivityCreate(CamelModel):
    """userId는 받지 않습니다. 기록의 사용자는 항상 인증된 요청자입니다."""
    type: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9_]+$")
    message: str = Field(..., min_length=1, max_length=500)
    project_id: Optional[int] = Field(None, gt=0, le=MAX_ID)
    service_id: Optional[int] = Field(None, gt=0, le=MAX_ID)
