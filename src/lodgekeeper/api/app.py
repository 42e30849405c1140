"""ASGI entrypoint: ``uvicorn lodgekeeper.api.app:app``."""

from .factory import create_app

app = create_app()
