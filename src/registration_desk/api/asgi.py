"""ASGI entrypoint for the registration desk API."""

from registration_desk.api.app import create_app
from registration_desk.containers import build_container

app = create_app(build_container())
