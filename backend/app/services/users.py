from typing import List

from app.core.errors import NotFoundError, ensure_uuid, storage_guard
from app.models.user import User


class UserService:

    async def list(self) -> List[User]:
        """All users, newest first."""
        with storage_guard("Database error while listing users"):
            return await User.all().order_by("-created_at")

    async def get(self, user_id: str) -> User:
        uid = ensure_uuid(user_id, "User")
        with storage_guard("Database error while getting user"):
            user = await User.get_or_none(id=uid)
        if user is None:
            raise NotFoundError("User not found")
        return user


user_service = UserService()
