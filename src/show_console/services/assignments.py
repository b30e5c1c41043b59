"""Capacity-constrained participant selection and assignment."""

import asyncio
import logging
from dataclasses import dataclass, field

from show_console.adapters.show_api_client import ShowApiClient
from show_console.domain.errors import CapacityError, InvalidRequestError
from show_console.domain.shows import MAX_SHOW_PARTICIPANTS, Participant, Show

_logger = logging.getLogger(__name__)


@dataclass
class AssignmentSelection:
    """Users and show picked for a pending assignment."""

    users: list[Participant] = field(default_factory=list)
    show: Show | None = None

    def is_selected(self, user_id: str) -> bool:
        return any(user.id == user_id for user in self.users)

    def toggle_user(self, user: Participant) -> None:
        """Add or remove a user from the selection."""
        if self.is_selected(user.id):
            self.users = [selected for selected in self.users if selected.id != user.id]
            return
        if len(self.users) >= MAX_SHOW_PARTICIPANTS:
            raise CapacityError(
                f"Maximum {MAX_SHOW_PARTICIPANTS} users can be selected"
            )
        self.users = [*self.users, user]

    def select_show(self, show: Show) -> None:
        """Pick the target show if it can take every selected user."""
        if len(show.clients) + len(self.users) > MAX_SHOW_PARTICIPANTS:
            raise CapacityError(
                f"This show can only accept {show.remaining_capacity} more users"
            )
        self.show = show

    def clear(self) -> None:
        self.users = []
        self.show = None


@dataclass
class AssignmentService:
    """Apply a selection by assigning each user to the chosen show."""

    client: ShowApiClient

    async def confirm(self, selection: AssignmentSelection) -> int:
        """Assign all selected users concurrently and return how many were sent.

        Calls are a best-effort batch: the first failure is raised, and
        assignments that already succeeded are not rolled back.
        """
        show = selection.show
        if not selection.users or show is None:
            raise InvalidRequestError("Please select users and a show")
        if len(show.clients) + len(selection.users) > MAX_SHOW_PARTICIPANTS:
            raise CapacityError(
                f"This show can only accept {show.remaining_capacity} more users"
            )

        await asyncio.gather(
            *(
                self.client.assign_user_to_show(user.id, show.id)
                for user in selection.users
            )
        )
        count = len(selection.users)
        _logger.info("Assigned %s user(s) to show %s", count, show.id)
        selection.clear()
        return count
