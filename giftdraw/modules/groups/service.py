import logging
import random
from typing import Any, Dict, List, Optional

from giftdraw.config import settings
from giftdraw.core import locks
from giftdraw.core.dependencies import check_group_owner, get_group_or_404, get_own_membership
from giftdraw.core.errors import ConflictError, NotFoundError, PreconditionError
from giftdraw.database.store import RowStore
from giftdraw.modules.groups.codes import generate_code, normalize_code
from giftdraw.modules.groups.schemas import (
    GroupCreate, GroupJoin, GroupResponse, GroupDetailResponse, GroupMemberResponse
)
from giftdraw.modules.profiles.schemas import ProfileResponse
from giftdraw.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, store: RowStore, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng
        self.profiles = ProfileService(store)

    def _new_code(self) -> str:
        """Generate a code not used by any existing group; best effort under concurrent creates"""
        for attempt in range(1, settings.join_code_max_attempts + 1):
            code = generate_code(settings.join_code_length, self.rng)
            if not self.store.select("groups", {"code": code}, columns="id", limit=1):
                return code
            logger.warning(f"Join code collision on attempt {attempt}")
        raise ConflictError("Could not allocate a unique group code, please try again")

    def _add_membership(self, group_id: str, user_data: Dict[str, Any]) -> Dict[str, Any]:
        return self.store.insert("group_members", {
            "group_id": group_id,
            "user_id": user_data["id"],
            "user_email": user_data.get("email") or "",
            "user_name": self.profiles.display_name_for(user_data),
        })

    @staticmethod
    def _member_name(row: Dict[str, Any], profile: Optional[ProfileResponse]) -> str:
        if profile and profile.display_name and profile.display_name.strip():
            return profile.display_name.strip()
        return row.get("user_name") or ""

    def create_group(self, group_data: GroupCreate, user_data: Dict[str, Any]) -> GroupResponse:
        """Create a group owned by the caller and make the caller its first member"""
        name = (group_data.name or "").strip()
        if not name:
            raise PreconditionError("Group name is required")

        group = self.store.insert("groups", {
            "name": name,
            "code": self._new_code(),
            "created_by": user_data["id"],
            "is_drawn": False,
        })
        self._add_membership(group["id"], user_data)
        logger.info(f"Group {group['id']} created by {user_data['id']}")
        return GroupResponse(**group)

    def join_group(self, join_data: GroupJoin, user_data: Dict[str, Any]) -> GroupResponse:
        """Join a group by its code"""
        code = normalize_code(join_data.code)
        if not code:
            raise PreconditionError("Group code is required")

        groups = self.store.select("groups", {"code": code}, limit=1)
        if not groups:
            raise NotFoundError("Invalid group code")
        group_id = groups[0]["id"]

        with locks.group_lock(group_id, settings.draw_lock_timeout_seconds):
            # Re-read under the lock: a draw or delete may have just finished
            groups = self.store.select("groups", {"id": group_id}, limit=1)
            if not groups:
                raise NotFoundError("Invalid group code")
            group = groups[0]

            existing = self.store.select(
                "group_members", {"group_id": group_id, "user_id": user_data["id"]}, columns="id", limit=1
            )
            if existing:
                raise ConflictError("You are already a member of this group")
            if group.get("is_drawn"):
                raise ConflictError("The draw has already taken place in this group")

            self._add_membership(group_id, user_data)
        logger.info(f"User {user_data['id']} joined group {group_id}")
        return GroupResponse(**group)

    def list_groups(self, user_id: str) -> List[GroupResponse]:
        """Groups the user is a member of, newest first"""
        memberships = self.store.select("group_members", {"user_id": user_id}, columns="group_id")
        if not memberships:
            return []
        group_ids = [m["group_id"] for m in memberships]
        rows = self.store.select("groups", {"id": group_ids}, order_by="created_at", desc=True)
        return [GroupResponse(**group) for group in rows]

    def get_group_detail(self, group_id: str, user_id: str) -> GroupDetailResponse:
        """Group with its member list; members only"""
        group = get_group_or_404(group_id, self.store)
        get_own_membership(group_id, user_id, self.store)

        is_owner = group.get("created_by") == user_id
        rows = self.store.select("group_members", {"group_id": group_id}, columns="id, user_id, user_name, user_email")
        # Current profile names win over the snapshot taken at join time
        profiles = self.profiles.get_profiles([row["user_id"] for row in rows])
        members = [
            GroupMemberResponse(
                id=row["id"],
                user_id=row["user_id"],
                user_name=self._member_name(row, profiles.get(row["user_id"])),
                user_email=row.get("user_email") if is_owner else None,
            )
            for row in rows
        ]
        return GroupDetailResponse(
            **group,
            members=members,
            is_owner=is_owner,
            can_draw=is_owner and len(members) >= settings.draw_min_members,
        )

    def delete_group(self, group_id: str, user_id: str) -> bool:
        """Delete a group and its memberships (owner only)"""
        group = get_group_or_404(group_id, self.store)
        check_group_owner(group, user_id, "delete the group")

        with locks.group_lock(group_id, settings.draw_lock_timeout_seconds):
            # Members first so no orphan membership rows remain
            self.store.delete("group_members", {"group_id": group_id})
            deleted = self.store.delete("groups", {"id": group_id})
        logger.info(f"Group {group_id} deleted by {user_id}")
        return len(deleted) > 0
