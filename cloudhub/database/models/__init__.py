from .user import User
from .project import Project
from .service import Service
from .resource_usage import ResourceUsage
from .activity import Activity
from .service_health import ServiceHealthStatus

__all__ = [
    "User",
    "Project",
    "Service",
    "ResourceUsage",
    "Activity",
    "ServiceHealthStatus",
]
