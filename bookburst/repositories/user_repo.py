from typing import Any, Dict, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.models.user import User


class UserRepository:
    """Repository for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalars().first()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def create(self, user_data: Dict[str, Any]) -> User:
        """Insert a user.

        Args:
            user_data: username, email, password_hash and optionally profile_picture

        Returns:
            The stored user
        """
        allowed_fields = {"username", "email", "password_hash", "profile_picture"}
        user = User(**{k: v for k, v in user_data.items() if k in allowed_fields})
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def update(self, user: User, user_data: Dict[str, Any]) -> User:
        allowed_fields = {"username", "profile_picture"}
        for key, value in user_data.items():
            if key in allowed_fields:
                setattr(user, key, value)

        await self.db.commit()
        await self.db.refresh(user)
        return user
