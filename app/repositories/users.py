# File: app/repositories/users.py
from typing import Optional

from app.core.ids import new_id
from app.repositories.base import Repository, now_iso
from app.schemas.user import User

BY_EMAIL = "users_by_email"


class UserRepository(Repository[User]):
    collection = "users"
    id_field = "user_id"
    model = User

    def create(self, fields: dict) -> User:
        now = now_iso()
        user = User.model_validate({
            "is_admin": False,
            **fields,
            "user_id": new_id(),
            "created_at": now,
            "updated_at": now,
        })
        with self.kv.atomic():
            self._put(user)
            self.kv.set((BY_EMAIL, user.email), user.user_id)
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        user_id = self.kv.get((BY_EMAIL, email))
        if not user_id:
            return None
        return self.get_by_id(user_id)

    def get_all(self) -> list[User]:
        return sorted(self._scan(), key=lambda u: u.created_at, reverse=True)

    def _on_update(self, before: User, after: User) -> None:
        if before.email != after.email:
            self.kv.delete((BY_EMAIL, before.email))
            self.kv.set((BY_EMAIL, after.email), after.user_id)

    def delete(self, user_id: str) -> bool:
        user = self.get_by_id(user_id)
        if user is None:
            return False
        with self.kv.atomic():
            self.kv.delete(self._key(user_id))
            self.kv.delete((BY_EMAIL, user.email))
        return True
