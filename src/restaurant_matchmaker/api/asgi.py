"""ASGI entrypoint for the restaurant matchmaker API."""

from restaurant_matchmaker.api.app import create_app
from restaurant_matchmaker.containers import build_container

app = create_app(build_container())
