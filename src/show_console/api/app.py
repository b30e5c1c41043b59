"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from show_console.api.models import (
    CaptureRequest,
    CreateShowRequest,
    PlayRequest,
    StandbyRequest,
)
from show_console.app_logging import configure_logging
from show_console.containers import AppContainer

CONSOLE_VIEWS: dict[str, str] = {
    "/create-show": "Schedule a new show",
    "/assign-users": "Assign waiting users to scheduled shows",
    "/edit-show": "Remove participants or delete shows",
    "/show-playback": "Play shows and send them to standby",
    "/capture-photo": "Capture and approve show photos",
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Show console using backend %s", container.settings.show_api_url)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse({"detail": "Page not found"}, status_code=404)
        return JSONResponse(
            {"detail": exc.detail}, status_code=exc.status_code, headers=exc.headers
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/")
    async def home() -> dict[str, object]:
        """Landing view listing the console views."""
        return {
            "title": "Show Management System",
            "views": [
                {"path": path, "description": description}
                for path, description in CONSOLE_VIEWS.items()
            ],
        }

    @app.get("/create-show")
    async def create_show_state(request: Request) -> dict[str, object]:
        return _container(request).create_show_view.snapshot()

    @app.post("/create-show")
    async def create_show(
        payload: CreateShowRequest, request: Request
    ) -> dict[str, object]:
        """Schedule a show starting at the requested time."""
        return await _container(request).create_show_view.create(payload.start_time)

    @app.get("/assign-users")
    async def assign_users_state(request: Request) -> dict[str, object]:
        """Load waiting users and available shows."""
        return await _container(request).assign_users_view.load()

    @app.post("/assign-users/users/{user_id}/toggle")
    async def toggle_user(user_id: str, request: Request) -> dict[str, object]:
        return await _container(request).assign_users_view.toggle_user(user_id)

    @app.post("/assign-users/shows/{show_id}/select")
    async def select_assignment_show(
        show_id: str, request: Request
    ) -> dict[str, object]:
        return await _container(request).assign_users_view.select_show(show_id)

    @app.post("/assign-users/confirm")
    async def confirm_assignment(request: Request) -> dict[str, object]:
        """Assign every selected user to the selected show."""
        return await _container(request).assign_users_view.confirm()

    @app.get("/edit-show")
    async def edit_show_state(request: Request) -> dict[str, object]:
        return await _container(request).edit_show_view.load()

    @app.post("/edit-show/shows/{show_id}/select")
    async def select_edit_show(show_id: str, request: Request) -> dict[str, object]:
        return await _container(request).edit_show_view.select(show_id)

    @app.patch("/edit-show/shows/{show_id}")
    async def update_show(
        show_id: str, request: Request, fields: dict[str, Any] = Body(...)
    ) -> dict[str, object]:
        """Patch show fields on the backend."""
        return await _container(request).edit_show_view.update(show_id, fields)

    @app.delete("/edit-show/shows/{show_id}/users/{user_id}")
    async def remove_user(
        show_id: str, user_id: str, request: Request
    ) -> dict[str, object]:
        return await _container(request).edit_show_view.remove_user(show_id, user_id)

    @app.delete("/edit-show/shows/{show_id}")
    async def delete_show(show_id: str, request: Request) -> dict[str, object]:
        return await _container(request).edit_show_view.delete(show_id)

    @app.get("/show-playback")
    async def show_playback_state(request: Request) -> dict[str, object]:
        return await _container(request).show_playback_view.load()

    @app.post("/show-playback/play")
    async def play_show(payload: PlayRequest, request: Request) -> dict[str, object]:
        """Run the play sequence for a show."""
        return await _container(request).show_playback_view.play(
            payload.show_id, payload.language
        )

    @app.post("/show-playback/standby")
    async def standby_show(
        payload: StandbyRequest, request: Request
    ) -> dict[str, object]:
        return await _container(request).show_playback_view.standby(payload.show_id)

    @app.get("/capture-photo")
    async def capture_photo_state(request: Request) -> dict[str, object]:
        return _container(request).capture_photo_view.snapshot()

    @app.post("/capture-photo/capture")
    async def capture_photo(
        payload: CaptureRequest, request: Request
    ) -> dict[str, object]:
        """Capture a photo, starting a session on the first attempt."""
        return await _container(request).capture_photo_view.capture(
            payload.show_id, payload.user_ids
        )

    @app.post("/capture-photo/photos/{photo_id}/select")
    async def select_photo(photo_id: str, request: Request) -> dict[str, object]:
        return await _container(request).capture_photo_view.select(photo_id)

    @app.post("/capture-photo/approve")
    async def approve_photo(request: Request) -> dict[str, object]:
        return await _container(request).capture_photo_view.approve()

    @app.delete("/capture-photo")
    async def close_capture(request: Request) -> dict[str, object]:
        """Leave the capture view, stopping its polling task."""
        return await _container(request).capture_photo_view.close()

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container
