"""ASGI entrypoint: ``uvicorn logbook.asgi:app``."""

import logging

from .application import create_app

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("logbook_asgi")

# 日本語: import 時点で既定アプリを構築 / English: Build default app instance at import time
app = create_app()

__all__ = ["app", "create_app"]
