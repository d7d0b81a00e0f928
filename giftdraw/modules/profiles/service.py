from typing import Any, Dict, List, Optional

from giftdraw.database.store import RowStore
from giftdraw.modules.profiles.schemas import ProfileResponse

DEFAULT_DISPLAY_NAME = "User"


class ProfileService:
    def __init__(self, store: RowStore):
        self.store = store

    def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Profile of one user, or None if the trigger has not created it yet"""
        rows = self.store.select("profiles", {"user_id": user_id}, limit=1)
        if not rows:
            return None
        return ProfileResponse(**rows[0])

    def get_profiles(self, user_ids: List[str]) -> Dict[str, ProfileResponse]:
        if not user_ids:
            return {}
        rows = self.store.select("profiles", {"user_id": list(set(user_ids))})
        return {row["user_id"]: ProfileResponse(**row) for row in rows}

    def display_name_for(self, user_data: Dict[str, Any]) -> str:
        """
        Name snapshot stored on a membership: profile display_name, then the
        local part of the email, then a generic placeholder.
        """
        profile = self.get_profile(user_data["id"])
        if profile and profile.display_name and profile.display_name.strip():
            return profile.display_name.strip()
        email = user_data.get("email") or ""
        local_part = email.split("@")[0].strip()
        return local_part or DEFAULT_DISPLAY_NAME
