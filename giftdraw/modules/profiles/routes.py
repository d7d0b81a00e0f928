from fastapi import APIRouter, Depends
from giftdraw.core.dependencies import get_current_user_id
from giftdraw.core.errors import NotFoundError
from giftdraw.database.store import RowStore
from giftdraw.database.store_provider import get_store
from giftdraw.modules.profiles.schemas import ProfileResponse
from giftdraw.modules.profiles.service import ProfileService
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(store: RowStore = Depends(get_store)) -> ProfileService:
    return ProfileService(store)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the caller's profile"""
    profile = service.get_profile(current_user["id"])
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile
