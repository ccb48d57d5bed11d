from .base import parse_payload, format_errors
from .user import UserCreate, UserUpdate, TokenRequest
from .project import ProjectCreate, ProjectUpdate
from .service import ServiceCreate, ServiceUpdate, validate_service_config, SERVICE_TYPES
from .usage import ResourceUsageCreate
from .activity import ActivityCreate
from .health import ServiceHealthUpsert
