from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

ProjectStatus = Literal["development", "staging", "production"]


class ProjectCreate(CamelModel):
    """userId는 받지 않습니다. 소유자는 항상 인증된 요청자입니다."""
    name: str = Field(..., min_length=1, max_length=100)
    status: ProjectStatus = "development"
    cost_per_month: float = Field(0.0, ge=0)


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[ProjectStatus] = None
    cost_per_month: Optional[float] = Field(None, ge=0)
