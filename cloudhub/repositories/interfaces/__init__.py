from .user import IUserRepository
from .project import IProjectRepository
from .service import IServiceRepository
from .resource_usage import IResourceUsageRepository
from .activity import IActivityRepository
from .service_health import IServiceHealthRepository

__all__ = [
    "IUserRepository",
    "IProjectRepository",
    "IServiceRepository",
    "IResourceUsageRepository",
    "IActivityRepository",
    "IServiceHealthRepository",
]
