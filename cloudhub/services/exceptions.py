# cloudhub/services/exceptions.py
from typing import Dict, List

# --- Not Found Exceptions ---
class UserNotFoundError(Exception):
    """사용자를 찾을 수 없을 때"""
    pass

class ProjectNotFoundError(Exception):
    """프로젝트를 찾을 수 없을 때"""
    pass

class ServiceNotFoundError(Exception):
    """서비스를 찾을 수 없을 때"""
    pass

class ServiceHealthNotFoundError(Exception):
    """서비스 타입의 상태 레코드를 찾을 수 없을 때"""
    pass

# --- Creation/Validation Exceptions ---
class UserCreationError(Exception):
    """사용자 생성 실패 시 (예: 사용자 이름 중복)"""
    pass

class RequestValidationError(ValueError):
    """요청 본문이나 쿼리 파라미터가 필드 제약을 만족하지 않을 때"""

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        super().__init__("Validation failed")

# --- Auth Exceptions ---
class TokenInvalidError(Exception):
    """토큰이 유효하지 않거나 없을 때"""
    pass

class AuthenticationError(Exception):
    """사용자 자격 증명 실패 시"""
    pass

class AccessDeniedError(Exception):
    """대상은 존재하지만 요청자가 소유자가 아닐 때"""
    pass
