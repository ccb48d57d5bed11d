from typing import List, Optional, Dict, Any
from cloudhub.database import models
from cloudhub.repositories.interfaces import IUserRepository
from .memory_base import MemoryTable

class MemoryUserRepository(IUserRepository):
    def __init__(self):
        self.table: MemoryTable[models.User] = MemoryTable()

    def create(self, user_model: models.User) -> models.User:
        if user_model.role is None:
            user_model.role = "user"
        return self.table.insert(user_model)

    def find_by_id(self, user_id: int) -> Optional[models.User]:
        return self.table.get(user_id)

    def find_by_username(self, username: str) -> Optional[models.User]:
        matches = self.table.select(lambda u: u.username == username)
        return matches[0] if matches else None

    def list_all(self) -> List[models.User]:
        return sorted(self.table.select(), key=lambda u: u.username)

    def update(self, user_id: int, fields: Dict[str, Any]) -> Optional[models.User]:
        return self.table.patch(user_id, fields)
