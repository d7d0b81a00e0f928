"""
Keeps one viewer's assignment fresh while they look at a group.

Notifications are only a hint to re-fetch: delivery is best effort, so callers
should also call refresh() whenever the group view is reopened.
"""
import logging
from typing import Callable, List, Optional

from giftdraw.core.errors import AppError
from giftdraw.database.store import EVENT_UPDATE, ChangeEvent, RowStore, Subscription
from giftdraw.modules.draws.schemas import AssignmentResponse
from giftdraw.modules.draws.service import DrawService

logger = logging.getLogger(__name__)


class AssignmentWatcher:
    def __init__(
        self,
        store: RowStore,
        group_id: str,
        viewer_id: str,
        on_change: Optional[Callable[[AssignmentResponse], None]] = None,
        service: Optional[DrawService] = None,
    ):
        self.store = store
        self.group_id = group_id
        self.viewer_id = viewer_id
        self.on_change = on_change
        self.service = service or DrawService(store)
        self.latest: Optional[AssignmentResponse] = None
        self._subscriptions: List[Subscription] = []

    def start(self) -> "AssignmentWatcher":
        if self._subscriptions:
            return self
        self._subscriptions = [
            self.store.subscribe("group_members", {"group_id": self.group_id}, EVENT_UPDATE, self._handle),
            # is_drawn flips last, after every member row is written
            self.store.subscribe("groups", {"id": self.group_id}, EVENT_UPDATE, self._handle),
        ]
        return self

    def stop(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    def refresh(self) -> AssignmentResponse:
        """On-demand re-fetch; errors propagate to the caller"""
        self.latest = self.service.reveal_assignment(self.group_id, self.viewer_id)
        return self.latest

    def _handle(self, change: ChangeEvent) -> None:
        try:
            result = self.refresh()
        except AppError as e:
            logger.warning(f"Re-fetch of assignment for group {self.group_id} after {change.event} failed: {e.message}")
            return
        if self.on_change is not None:
            self.on_change(result)

    def __enter__(self) -> "AssignmentWatcher":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
