"""ASGI entrypoint for the FoodScan API."""

from foodscan.api.app import create_app
from foodscan.containers import build_container

app = create_app(build_container())
