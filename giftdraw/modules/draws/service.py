import logging
import random
from typing import Any, Dict, List, Optional

from giftdraw.config import settings
from giftdraw.core import locks
from giftdraw.core.dependencies import check_group_owner, get_group_or_404, get_own_membership
from giftdraw.core.errors import ConflictError, PreconditionError, StoreError
from giftdraw.database.store import RowStore
from giftdraw.modules.draws.engine import build_cycle, validate_assignment
from giftdraw.modules.draws.schemas import AssignmentResponse, DrawResponse
from giftdraw.modules.profiles.service import DEFAULT_DISPLAY_NAME, ProfileService

logger = logging.getLogger(__name__)


class DrawService:
    def __init__(self, store: RowStore, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng
        self.profiles = ProfileService(store)

    def perform_draw(self, group_id: str, caller_id: str, confirm_redraw: bool = False) -> DrawResponse:
        """
        Assign every member of the group someone else to give to (owner only).

        Draws on one group are serialized within this process. Writes go in
        this order: clear is_drawn (re-draws only), write every member's
        assigned_to, set is_drawn. If any write fails the previous values are
        restored, so is_drawn is never true over a half-written assignment set.
        """
        group = get_group_or_404(group_id, self.store)
        check_group_owner(group, caller_id, "perform the draw")

        with locks.group_lock(group_id, settings.draw_lock_timeout_seconds):
            # Re-read under the lock: another draw may have just finished
            group = get_group_or_404(group_id, self.store)
            was_drawn = bool(group.get("is_drawn"))
            if was_drawn and not confirm_redraw:
                raise ConflictError("The draw has already taken place; confirm to draw again")

            members = self.store.select("group_members", {"group_id": group_id})
            if len(members) < settings.draw_min_members:
                raise PreconditionError(
                    f"At least {settings.draw_min_members} participants are needed for the draw"
                )

            user_ids = [m["user_id"] for m in members]
            assignment = build_cycle(user_ids, self.rng, settings.draw_min_members)
            validate_assignment(assignment, user_ids)
            self._commit(group_id, members, assignment, was_drawn)

        logger.info(f"Draw committed for group {group_id} with {len(members)} participants (redraw={was_drawn})")
        return DrawResponse(
            group_id=group_id,
            participants=len(members),
            redraw=was_drawn,
            message="Draw completed. Each participant can now see their assignment.",
        )

    def _commit(self, group_id: str, members: List[Dict[str, Any]], assignment: Dict[str, str], was_drawn: bool) -> None:
        previous = {m["id"]: m.get("assigned_to") for m in members}
        written: List[str] = []
        try:
            if was_drawn:
                self.store.update("groups", {"id": group_id}, {"is_drawn": False})
            for member in members:
                updated = self.store.update(
                    "group_members", {"id": member["id"]}, {"assigned_to": assignment[member["user_id"]]}
                )
                if not updated:
                    raise StoreError("A member left the group while the draw was running")
                written.append(member["id"])
            self.store.update("groups", {"id": group_id}, {"is_drawn": True})
        except StoreError as e:
            logger.error(f"Draw for group {group_id} failed after {len(written)} member writes: {e.message}")
            self._rollback(group_id, previous, written, was_drawn)
            raise

    def _rollback(self, group_id: str, previous: Dict[str, Optional[str]], written: List[str], was_drawn: bool) -> None:
        """Best effort: put back every value the failed draw touched"""
        failures = 0
        for member_id in written:
            try:
                self.store.update("group_members", {"id": member_id}, {"assigned_to": previous[member_id]})
            except StoreError as e:
                failures += 1
                logger.error(f"Rollback of member {member_id} in group {group_id} failed: {e.message}")
        try:
            self.store.update("groups", {"id": group_id}, {"is_drawn": was_drawn})
        except StoreError as e:
            failures += 1
            logger.error(f"Rollback of draw flag for group {group_id} failed: {e.message}")
        if failures:
            logger.error(f"Group {group_id} left inconsistent: {failures} rollback write(s) failed")
        else:
            logger.info(f"Rolled back draw for group {group_id}")

    def reveal_assignment(self, group_id: str, viewer_id: str) -> AssignmentResponse:
        """
        Name of the person the viewer gives to. Only the viewer's own
        membership row is read; other members' assignments never leave the store.
        """
        group = get_group_or_404(group_id, self.store)
        membership = get_own_membership(group_id, viewer_id, self.store)

        receiver_id = membership.get("assigned_to")
        if not group.get("is_drawn") or not receiver_id:
            return AssignmentResponse(group_id=group_id, is_drawn=bool(group.get("is_drawn")))

        return AssignmentResponse(
            group_id=group_id,
            is_drawn=True,
            assigned_name=self._receiver_name(group_id, receiver_id),
        )

    def _receiver_name(self, group_id: str, receiver_id: str) -> str:
        profile = self.profiles.get_profile(receiver_id)
        if profile and profile.display_name and profile.display_name.strip():
            return profile.display_name.strip()
        # Fall back to the name captured when the receiver joined
        rows = self.store.select(
            "group_members", {"group_id": group_id, "user_id": receiver_id}, columns="user_name", limit=1
        )
        if rows and rows[0].get("user_name"):
            return rows[0]["user_name"]
        return DEFAULT_DISPLAY_NAME
