"""ASGI entrypoint: ``uvicorn main:app``."""

import logging

from app import create_app
from core import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
