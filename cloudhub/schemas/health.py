from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

HealthState = Literal["operational", "degraded", "outage"]


class ServiceHealthUpsert(CamelModel):
    status: HealthState = "operational"
    uptime: Optional[float] = Field(None, ge=0, le=100)
