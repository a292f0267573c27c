from gunicorn.app.base import BaseApplication
from gunicorn.util import import_app
from loguru import logger


class GunicornApplication(BaseApplication):
    """
    Gunicorn launcher for the pairlink ASGI app with uvicorn workers.

    Each worker imports the app and builds its own claim cache; claims are not
    shared between workers.
    """

    def __init__(self, app_uri: str, options: dict | None = None):
        self.app_uri = app_uri
        self.options = options or {}
        super().__init__()

    def load_config(self):
        for key, value in self.options.items():
            if key.lower() in self.cfg.settings and value is not None:
                self.cfg.set(key.lower(), value)

        workers = self.options.get("workers") or 1
        if workers > 1:
            logger.warning(
                f"Running {workers} workers: pair-status polls only see claims "
                f"recorded by the same worker"
            )

    def load(self):
        return import_app(self.app_uri)
