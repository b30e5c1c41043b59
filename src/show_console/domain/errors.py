"""Exception hierarchy for the show console."""


class ShowConsoleError(Exception):
    """Base exception for all console errors."""


class ShowApiError(ShowConsoleError):
    """Raised when a backend request fails in transport or returns non-2xx."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class InvalidRequestError(ShowConsoleError):
    """Raised when a request is rejected locally before reaching the backend."""


class CapacityError(ShowConsoleError):
    """Raised when a selection would exceed a show's participant capacity."""


class CaptureLimitError(ShowConsoleError):
    """Raised when a capture session has used all of its attempts."""


class PlaybackStepError(ShowConsoleError):
    """Raised when a step of the play sequence fails."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(message)
