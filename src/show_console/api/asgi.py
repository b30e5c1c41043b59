"""Module-level show console app for uvicorn and serverless hosts."""

from show_console.api.app import create_app
from show_console.containers import build_container

app = create_app(build_container())
