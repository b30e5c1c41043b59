"""In-memory show list held by a console view."""

from dataclasses import dataclass, field

from show_console.domain.shows import Show


@dataclass
class ShowBoard:
    """Read-through cache of the shows fetched for one view."""

    shows: list[Show] = field(default_factory=list)

    def replace(self, shows: list[Show]) -> None:
        """Replace the cached list with a fresh backend response."""
        self.shows = list(shows)

    def get(self, show_id: str) -> Show | None:
        """Return a cached show by id, if present."""
        for show in self.shows:
            if show.id == show_id:
                return show
        return None

    def merge(self, updated: Show) -> None:
        """Replace the show with the same id in place, appending if new."""
        for index, show in enumerate(self.shows):
            if show.id == updated.id:
                self.shows[index] = updated
                return
        self.shows.append(updated)

    def remove_participant(self, show_id: str, user_id: str) -> Show | None:
        """Drop a participant from the cached show after a remote removal."""
        show = self.get(show_id)
        if show is None:
            return None
        updated = show.model_copy(
            update={
                "clients": [client for client in show.clients if client.id != user_id]
            }
        )
        self.merge(updated)
        return updated

    def discard(self, show_id: str) -> None:
        """Remove a deleted show from the cached list."""
        self.shows = [show for show in self.shows if show.id != show_id]
