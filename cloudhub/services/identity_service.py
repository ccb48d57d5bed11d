import hashlib
import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Any

from cloudhub.database import models, utcnow
from cloudhub.repositories.interfaces import IUserRepository
from cloudhub.schemas import UserCreate, UserUpdate
from cloudhub.utils.serializers import user_to_dict, isoformat
from cloudhub.services.exceptions import (
    UserCreationError, UserNotFoundError, AccessDeniedError,
    AuthenticationError, TokenInvalidError
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerContext:
    """인증된 요청자 정보. 모든 핸들러는 이 객체를 기준으로 소유권을 검사합니다."""
    user_id: int
    username: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


class IdentityService:
    """사용자 계정, 인증 토큰 발급/검증 등 신원 관리 서비스를 제공합니다."""
    _token_cache = {}

    def __init__(self, user_repo: IUserRepository, token_ttl_minutes: int = 60):
        """
        IdentityService를 초기화합니다.

        Args:
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리.
            token_ttl_minutes: 발급한 토큰의 유효 시간(분).
        """
        self.user_repo = user_repo
        self.token_ttl = timedelta(minutes=token_ttl_minutes)

    def create_user(self, data: UserCreate, role: str = "user") -> Dict[str, Any]:
        """
        새로운 사용자를 생성합니다. 비밀번호는 해시하여 저장합니다.

        Raises:
            UserCreationError: 동일한 이름의 사용자가 이미 존재할 때.
        """
        if self.user_repo.find_by_username(data.username):
            raise UserCreationError(f"User with username '{data.username}' already exists.")

        new_user = models.User(
            username=data.username,
            password_hash=hash_password(data.password),
            display_name=data.display_name,
            avatar=data.avatar,
            role=role,
        )
        created_user = self.user_repo.create(new_user)
        logger.info("User '%s' created (id=%s)", created_user.username, created_user.id)
        return user_to_dict(created_user)

    def get_user(self, user_id: int) -> Dict[str, Any]:
        """
        ID로 특정 사용자를 조회합니다. (비밀번호 제외)

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        return user_to_dict(user)

    def update_user(self, caller: CallerContext, user_id: int, data: UserUpdate) -> Dict[str, Any]:
        """
        사용자 프로필을 수정합니다. 본인 또는 관리자만 수정할 수 있고, role은 관리자만 바꿀 수 있습니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            AccessDeniedError: 다른 사용자의 프로필이거나, 관리자가 아닌데 role을 바꾸려 할 때.
        """
        if not self.user_repo.find_by_id(user_id):
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        if caller.user_id != user_id and not caller.is_admin:
            raise AccessDeniedError("Access denied")

        fields = data.model_dump(exclude_unset=True)
        if "role" in fields and not caller.is_admin:
            raise AccessDeniedError("Only administrators can change roles.")

        updated = self.user_repo.update(user_id, fields)
        if not updated:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        return user_to_dict(updated)

    def authenticate(self, username: str, password: str) -> Dict[str, str]:
        """
        자격증명을 검증하고, 성공 시 인증 토큰을 발급합니다.

        Raises:
            AuthenticationError: 사용자가 없거나 비밀번호가 틀렸을 때.
        """
        user = self.user_repo.find_by_username(username)
        if not user or user.password_hash != hash_password(password):
            raise AuthenticationError("Invalid username or password.")

        self._prune_expired_tokens()
        token = str(uuid.uuid4())
        expires_at = utcnow() + self.token_ttl
        self._token_cache[token] = {
            'user_id': user.id,
            'username': user.username,
            'expires_at': expires_at
        }
        logger.info("Token issued for user '%s'", user.username)
        return {"token": token, "expiresAt": isoformat(expires_at)}

    def validate_token(self, token: str) -> CallerContext:
        """
        인증 토큰의 유효성을 검증하고, 유효하면 요청자 정보를 반환합니다.

        Raises:
            TokenInvalidError: 토큰을 찾을 수 없거나 만료되었을 때.
        """
        token_data = self._token_cache.get(token)
        if not token_data:
            raise TokenInvalidError("Token not found or invalid.")

        if utcnow() > token_data['expires_at']:
            del self._token_cache[token]
            raise TokenInvalidError("Token has expired.")

        # 역할은 발급 시점이 아닌 현재 사용자 정보에서 읽습니다.
        user = self.user_repo.find_by_id(token_data['user_id'])
        if not user:
            del self._token_cache[token]
            raise TokenInvalidError("Token owner no longer exists.")

        return CallerContext(
            user_id=user.id,
            username=user.username,
            role=user.role,
        )

    def revoke_token(self, token: str) -> bool:
        """토큰을 폐기합니다. 이미 없는 토큰이면 False를 반환합니다."""
        return self._token_cache.pop(token, None) is not None

    def _prune_expired_tokens(self) -> int:
        """만료된 토큰을 캐시에서 제거하고, 제거한 개수를 반환합니다."""
        now = utcnow()
        expired = [token for token, data in self._token_cache.items() if now > data['expires_at']]
        for token in expired:
            del self._token_cache[token]
        if expired:
            logger.debug("Pruned %s expired token(s)", len(expired))
        return len(expired)
