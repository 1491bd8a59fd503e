from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.common.utils.date_utils import month_key
from bookburst.core.exceptions import (
    ConflictException,
    NotFoundException,
    UnauthorizedException,
)
from bookburst.core.security import create_access_token, hash_password, verify_password
from bookburst.logging.setup import get_logger
from bookburst.models.bookshelf import BookshelfStatus
from bookburst.models.user import User
from bookburst.repositories.bookshelf_repo import BookshelfRepository
from bookburst.repositories.review_repo import ReviewRepository
from bookburst.repositories.user_repo import UserRepository
from bookburst.schemas.user import UserCreate, UserUpdate

logger = get_logger(__name__)

EMAIL_TAKEN = "User with this email already exists"
USERNAME_TAKEN = "Username is already taken"


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)
        self.bookshelf_repo = BookshelfRepository(db)
        self.review_repo = ReviewRepository(db)

    async def register(self, data: UserCreate) -> Dict[str, Any]:
        """
        Create an account and sign it in.

        Args:
            data: Username, email and password

        Returns:
            ``{"user": User, "token": str}``

        Raises:
            ConflictException: Email or username already in use
        """
        email = data.email.lower()
        if await self.user_repo.get_by_email(email):
            raise ConflictException(detail=EMAIL_TAKEN, field="email")
        if await self.user_repo.get_by_username(data.username):
            raise ConflictException(detail=USERNAME_TAKEN, field="username")

        try:
            user = await self.user_repo.create(
                {
                    "username": data.username,
                    "email": email,
                    "password_hash": hash_password(data.password),
                }
            )
        except IntegrityError:
            await self.db.rollback()
            if await self.user_repo.get_by_email(email):
                raise ConflictException(detail=EMAIL_TAKEN, field="email")
            raise ConflictException(detail=USERNAME_TAKEN, field="username")

        logger.info(f"Registered user {user.id} ({user.username})")
        return {"user": user, "token": create_access_token(user.id)}

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for {email}")
            raise UnauthorizedException(
                detail="Invalid credentials", code="invalid_credentials"
            )

        logger.info(f"User {user.id} logged in")
        return {"user": user, "token": create_access_token(user.id)}

    async def update_profile(self, user: User, data: UserUpdate) -> User:
        """Update username and/or profile picture; empty values are ignored."""
        update_data = data.model_dump(exclude_none=True)
        user_id = user.id

        username = update_data.get("username")
        if username and username != user.username:
            other = await self.user_repo.get_by_username(username)
            if other and other.id != user_id:
                raise ConflictException(detail=USERNAME_TAKEN, field="username")

        if not update_data:
            return user

        try:
            return await self.user_repo.update(user, update_data)
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Username change for user {user_id} rejected by the database")
            raise ConflictException(detail=USERNAME_TAKEN, field="username")

    async def get_user(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundException(detail="User not found")
        return user

    async def get_public_profile(self, user_id: int) -> Dict[str, Any]:
        """A user with their whole shelf and every review they wrote."""
        user = await self.get_user(user_id)
        books, _ = await self.bookshelf_repo.list_for_user(user_id)
        reviews, _ = await self.review_repo.list_reviews(user_id=user_id)
        return {"user": user, "books": books, "reviews": reviews}

    async def get_reading_history(self, user_id: int) -> Dict[str, List[Dict[str, Any]]]:
        """
        Finished books grouped by the month they were finished.

        Items without a finish date fall back to their last update. Months are
        returned newest first, and so are the books inside each month.
        """
        await self.get_user(user_id)
        items, _ = await self.bookshelf_repo.list_for_user(
            user_id, status=BookshelfStatus.FINISHED.value
        )

        def finished_at(item):
            return item.finish_date or item.updated_at

        groups: Dict[str, Dict[str, Any]] = {}
        for item in sorted(items, key=lambda i: (finished_at(i), i.id), reverse=True):
            when = finished_at(item)
            group = groups.setdefault(
                month_key(when), {"month": month_key(when), "date": when, "books": []}
            )
            group["books"].append(item)

        history = sorted(groups.values(), key=lambda g: g["month"], reverse=True)
        return {"history": history}
