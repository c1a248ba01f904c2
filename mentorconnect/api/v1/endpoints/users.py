from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from mentorconnect.core.database import get_db
from mentorconnect.core.exceptions import UserNotFoundError
from mentorconnect.models.user import User
from mentorconnect.schemas.user import (
    ProfileCompletion,
    ProfileUpdate,
    PublicProfileResponse,
    UserResponse,
)
from mentorconnect.modules.auth.dependencies import get_current_user, get_profiled_user
from mentorconnect.services.avatar_storage_service import AvatarStorageService
from mentorconnect.services.profile_service import ProfileService

router = APIRouter()


def get_avatar_storage() -> AvatarStorageService:
    return AvatarStorageService()


@router.get("/me", response_model=UserResponse)
async def get_my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/me/profile", response_model=UserResponse)
async def complete_profile(
    data: ProfileCompletion,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Profile setup: choose student or alumni and fill in the role's fields"""
    return await ProfileService(db).complete_profile(current_user, data)


@router.patch("/me", response_model=UserResponse)
async def update_my_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProfileService(db).update_profile(current_user, data)


@router.post("/me/avatar", response_model=UserResponse)
async def upload_avatar(
    file: UploadFile = File(..., description="Profile picture (JPEG, PNG, GIF or WebP, max 5MB)"),
    current_user: User = Depends(get_current_user),
    storage: AvatarStorageService = Depends(get_avatar_storage),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload a profile picture.

    Available during profile setup too. The stored picture's URL becomes
    the profile's profile_image_url.
    """
    content = await file.read()
    stored = await storage.save_profile_picture(
        str(current_user.id), content, file.filename, file.content_type
    )
    return await ProfileService(db).set_profile_image(current_user, stored["url"])


@router.get("/{user_id}", response_model=PublicProfileResponse)
async def get_user_profile(
    user_id: str,
    current_user: User = Depends(get_profiled_user),
    db: AsyncSession = Depends(get_db)
):
    """Public profile of another user"""
    user = await ProfileService(db).get_user(user_id)
    if not user.is_profile_complete or not user.is_active:
        raise UserNotFoundError(user_id)
    return user
