"""
ASGI entry point: ``uvicorn app.main:app``.
"""

import logging

import sentry_sdk

from app.config.settings import get_settings
from app.core.app_factory import create_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)
settings = get_settings()

if settings.SENTRY_DSN:
    # Request bodies carry patient data
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=False,
        environment=settings.ENVIRONMENT,
        release=settings.VERSION,
    )

app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Serving {settings.PROJECT_NAME} in {settings.ENVIRONMENT} mode")
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
