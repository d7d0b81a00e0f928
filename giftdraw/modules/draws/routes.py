from fastapi import APIRouter, Depends
from giftdraw.core.dependencies import get_current_user_id
from giftdraw.database.store import RowStore
from giftdraw.database.store_provider import get_store
from giftdraw.modules.draws.schemas import AssignmentResponse, DrawRequest, DrawResponse
from giftdraw.modules.draws.service import DrawService
from typing import Dict, Optional

router = APIRouter(prefix="/groups", tags=["draws"])


def get_draw_service(store: RowStore = Depends(get_store)) -> DrawService:
    return DrawService(store)


@router.post("/{group_id}/draw", response_model=DrawResponse)
async def perform_draw(
    group_id: str,
    draw_request: Optional[DrawRequest] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: DrawService = Depends(get_draw_service)
):
    """Run the draw (group creator only). Drawing again requires confirm_redraw"""
    confirm = draw_request.confirm_redraw if draw_request else False
    return service.perform_draw(group_id, current_user["id"], confirm_redraw=confirm)


@router.get("/{group_id}/assignment", response_model=AssignmentResponse)
async def get_my_assignment(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: DrawService = Depends(get_draw_service)
):
    """Who the caller gives to in this group, and nothing about anyone else"""
    return service.reveal_assignment(group_id, current_user["id"])
