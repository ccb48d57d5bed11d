from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import CamelModel, MAX_ID, to_naive_utc


class ResourceUsageCreate(CamelModel):
    service_id: int = Field(..., gt=0, le=MAX_ID)
    cpu_usage: float = Field(0.0, ge=0, le=100)
    memory_usage: float = Field(0.0, ge=0, le=100)
    storage_usage: float = Field(0.0, ge=0, le=100)
    network_usage: float = Field(0.0, ge=0, le=100)
    # 과거 샘플을 채워 넣을 때만 지정합니다. 생략하면 서버 시각을 사용합니다.
    timestamp: Optional[datetime] = None

    normalize_timestamp = field_validator("timestamp")(to_naive_utc)
