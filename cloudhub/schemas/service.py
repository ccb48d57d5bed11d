"""
서비스(Service) 요청 스키마와 타입별 설정(config) 스키마.

config는 서비스 type을 태그로 하는 tagged union으로 다룹니다.
타입마다 허용 필드가 정해져 있고, 알 수 없는 필드는 거부합니다.
검증을 통과한 문서는 받은 그대로 저장하므로 요청과 응답의 config가 정확히 일치합니다.
"""
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cloudhub.services.exceptions import RequestValidationError
from .base import CamelModel, MAX_ID, format_errors

ServiceType = Literal["compute", "database", "storage", "function", "network", "web3", "spatial", "3d_amp"]
ServiceStatus = Literal["active", "inactive", "error"]

SERVICE_TYPES = ("compute", "database", "storage", "function", "network", "web3", "spatial", "3d_amp")


class _ServiceConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=None, populate_by_name=True)


class ComputeConfig(_ServiceConfig):
    cpu: int = Field(1, ge=1, le=128)
    memory: str = "1GB"
    scaling: Literal["manual", "auto"] = "manual"


class DatabaseConfig(_ServiceConfig):
    engine: str = "postgres"
    size: Literal["small", "medium", "large"] = "small"
    replicas: int = Field(1, ge=0, le=16)


class StorageConfig(_ServiceConfig):
    type: Literal["object", "block", "file"] = "object"
    redundancy: Literal["standard", "high"] = "standard"


class FunctionConfig(_ServiceConfig):
    runtime: str = "python3.12"
    memory_mb: int = Field(128, alias="memoryMb", ge=64, le=10240)
    timeout_seconds: int = Field(30, alias="timeoutSeconds", ge=1, le=900)


class NetworkConfig(_ServiceConfig):
    cidr: str = Field("10.0.0.0/16", pattern=r"^\d{1,3}(\.\d{1,3}){3}/\d{1,2}$")
    public: bool = False


class Web3Config(_ServiceConfig):
    provider: str
    features: List[str] = []


class SpatialConfig(_ServiceConfig):
    provider: str
    features: List[str] = []


class Amp3dConfig(_ServiceConfig):
    renderer: str = "webgl"
    quality: Literal["low", "medium", "high"] = "medium"


CONFIG_SCHEMAS: Dict[str, Type[_ServiceConfig]] = {
    "compute": ComputeConfig,
    "database": DatabaseConfig,
    "storage": StorageConfig,
    "function": FunctionConfig,
    "network": NetworkConfig,
    "web3": Web3Config,
    "spatial": SpatialConfig,
    "3d_amp": Amp3dConfig,
}


def validate_service_config(service_type: str, config: Any) -> Dict[str, Any]:
    """
    서비스 타입에 맞는 스키마로 설정 문서를 검증하고, 원본 문서를 그대로 돌려줍니다.

    Raises:
        RequestValidationError: 문서가 타입별 스키마와 맞지 않을 때. path는 "config."로 시작합니다.
    """
    schema = CONFIG_SCHEMAS[service_type]
    if not isinstance(config, dict):
        raise RequestValidationError([{"path": "config", "message": "Config must be a JSON object"}])
    try:
        schema.model_validate(config)
    except ValidationError as e:
        raise RequestValidationError(format_errors(e, prefix=("config",))) from e
    return config


def _normalize_status(value):
    # 이전 버전 클라이언트는 'stopped'를 사용합니다.
    return "inactive" if value == "stopped" else value


class ServiceCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: ServiceType
    status: ServiceStatus = "active"
    project_id: int = Field(..., gt=0, le=MAX_ID)
    config: Dict[str, Any] = {}

    normalize_status = field_validator("status", mode="before")(_normalize_status)


class ServiceUpdate(CamelModel):
    """서비스를 다른 프로젝트로 옮기는 것은 허용하지 않습니다."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[ServiceType] = None
    status: Optional[ServiceStatus] = None
    config: Optional[Dict[str, Any]] = None

    normalize_status = field_validator("status", mode="before")(_normalize_status)
