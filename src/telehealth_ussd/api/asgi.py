"""ASGI entrypoint for the telehealth USSD API."""

from telehealth_ussd.api.app import create_app
from telehealth_ussd.containers import build_container

app = create_app(build_container())
