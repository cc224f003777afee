import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.logging import setup_logging
from .core.lifecycle import register_lifecycle
from .api.v1.router import api_router
from .core.settings import get_settings, settings_diagnostics

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging()
    s = get_settings()
    app = FastAPI(title=s.app_name, version="0.1.0", debug=s.debug)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)
    register_lifecycle(app)

    @app.get("/health", tags=["status"])
    def health() -> dict:
        return {"status": "ok", "env": s.env}

    logger.info(f"settings: {settings_diagnostics()}")
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tutor.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=True)
