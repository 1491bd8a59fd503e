from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.api.deps import get_current_user
from bookburst.core.db import get_session
from bookburst.core.exceptions import APIException, ServerException
from bookburst.logging.setup import get_logger
from bookburst.models.user import User
from bookburst.schemas.user import (
    AuthResponse,
    ReadingHistoryResponse,
    UserCreate,
    UserLogin,
    UserProfileResponse,
    UserResponse,
    UserUpdate,
)
from bookburst.services.user_service import UserService

router = APIRouter()
logger = get_logger("bookburst.api.users")


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_session)):
    """
    Register a new account.

    - **username**: 3 to 30 characters, unique
    - **email**: Valid email address, unique
    - **password**: At least 6 characters
    """
    try:
        return await UserService(db).register(user_data)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error registering user: {e}", exc_info=True)
        raise ServerException(detail="Server error during registration")


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_session)):
    """Exchange email and password for an access token."""
    try:
        return await UserService(db).login(credentials.email, credentials.password)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error logging in: {e}", exc_info=True)
        raise ServerException(detail="Server error during login")


@router.get("/profile", response_model=UserResponse)
async def get_my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_my_profile(
    profile_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Update the signed-in user's profile.

    - **username**: New username (optional)
    - **profile_picture**: Profile picture URL (optional)
    """
    user_id = current_user.id
    try:
        return await UserService(db).update_profile(current_user, profile_data)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error updating profile of user {user_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error updating profile")


@router.get("/{user_id}/profile", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: int = Path(..., gt=0), db: AsyncSession = Depends(get_session)
):
    """Public profile: the user, their shelf and their reviews."""
    try:
        return await UserService(db).get_public_profile(user_id)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching profile of user {user_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching user profile")


@router.get("/{user_id}/reading-history", response_model=ReadingHistoryResponse)
async def get_reading_history(
    user_id: int = Path(..., gt=0), db: AsyncSession = Depends(get_session)
):
    """Finished books grouped by month, newest month first."""
    try:
        return await UserService(db).get_reading_history(user_id)
    except APIException:
        raise
    except Exception as e:
        logger.error(
            f"Error fetching reading history of user {user_id}: {e}", exc_info=True
        )
        raise ServerException(detail="Server error fetching reading history")
