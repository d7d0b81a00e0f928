"""
Core dependencies for route protection and group access checks
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from giftdraw.core.errors import AuthorizationError, NotFoundError
from giftdraw.database.store import RowStore
from giftdraw.database.supabase_client import get_supabase
from giftdraw.modules.auth.service import AuthService
from supabase import Client
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    return auth_service.get_current_user(token)


def get_group_or_404(group_id: str, store: RowStore) -> Dict[str, Any]:
    rows = store.select("groups", {"id": group_id}, limit=1)
    if not rows:
        raise NotFoundError("Group not found")
    return rows[0]


def check_group_owner(group: Dict[str, Any], user_id: str, action: str) -> None:
    """Only the creator of a group may draw or delete it"""
    if group.get("created_by") != user_id:
        logger.info(f"Refused {action} on group {group.get('id')} for non-owner {user_id}")
        raise AuthorizationError(f"Only the group creator can {action}")


def get_own_membership(group_id: str, user_id: str, store: RowStore) -> Dict[str, Any]:
    """The caller's own membership row; the only member row a viewer may read in full"""
    rows = store.select("group_members", {"group_id": group_id, "user_id": user_id}, limit=1)
    if not rows:
        raise AuthorizationError("You must be a member of this group")
    return rows[0]
