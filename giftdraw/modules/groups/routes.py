from fastapi import APIRouter, Depends
from giftdraw.core.dependencies import get_current_user_id
from giftdraw.database.store import RowStore
from giftdraw.database.store_provider import get_store
from giftdraw.modules.groups.schemas import (
    GroupCreate, GroupJoin, GroupResponse, GroupDetailResponse
)
from giftdraw.modules.groups.service import GroupService
from typing import List, Dict

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(store: RowStore = Depends(get_store)) -> GroupService:
    return GroupService(store)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Create a new group; the caller becomes its owner and first member"""
    return service.create_group(group_data, current_user)


@router.post("/join", response_model=GroupResponse, status_code=201)
async def join_group(
    join_data: GroupJoin,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Join a group with its share code"""
    return service.join_group(join_data, current_user)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """List groups the caller is a member of"""
    return service.list_groups(current_user["id"])


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Get group with its members (only if the caller is a member)"""
    return service.get_group_detail(group_id, current_user["id"])


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Delete group and its memberships (group creator only)"""
    service.delete_group(group_id, current_user["id"])
    return None
