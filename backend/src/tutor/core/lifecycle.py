import logging

from fastapi import FastAPI

from .settings import get_settings

logger = logging.getLogger(__name__)


def register_lifecycle(app: FastAPI) -> None:
    @app.on_event("startup")
    async def on_startup() -> None:  # noqa: F811
        s = get_settings()
        if not any(s.providers[name].api_keys for name in s.ordered_providers()):
            logger.warning("No generation provider keys configured; answers will quote passages only")
        if s.embedding.enabled and not s.embedding.api_key:
            logger.warning("Embedding enabled without an API key; keyword retrieval only")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:  # noqa: F811
        logger.info("Tutor API shutting down")
