from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from cloudhub.services.exceptions import RequestValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# 32비트 INTEGER 기본 키의 최댓값. 본문의 ID 필드는 이 범위를 넘을 수 없습니다.
MAX_ID = 2**31 - 1


class CamelModel(BaseModel):
    """JSON에서는 camelCase, 파이썬에서는 snake_case 필드 이름을 사용하는 기본 스키마."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """타임존이 있는 시각은 UTC로 바꾼 뒤 타임존 정보를 뗍니다."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_errors(exc: ValidationError, prefix: Tuple[Any, ...] = ()) -> List[Dict[str, str]]:
    """pydantic 오류를 [{"path": "a.b", "message": "..."}] 형식으로 변환합니다."""
    details = []
    for error in exc.errors():
        loc = prefix + tuple(error.get("loc", ()))
        details.append({
            "path": ".".join(str(part) for part in loc) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return details


def parse_payload(schema: Type[SchemaT], data: Any) -> SchemaT:
    """
    요청 본문을 스키마로 검증합니다.

    Raises:
        RequestValidationError: 필드 검증에 실패했을 때.
    """
    if not isinstance(data, dict):
        raise RequestValidationError([{"path": "body", "message": "Request body must be a JSON object"}])
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(format_errors(e)) from e
