"""
Application entry point
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import LoggingMiddleware, RequestIDMiddleware
from api.routes import files as files_routes
from api.routes import retrieval as retrieval_routes
from api.routes import ui as ui_routes
from api.routes import upload as upload_routes
from core.config import Settings, get_settings
from core.exceptions import register_exception_handlers
from core.logging_config import configure_logging, get_logger
from infrastructure.external.storage import (
    get_storage_config,
    init_storage_client,
    shutdown_storage_client,
)
from infrastructure.security.shared_secret import SharedSecretAuthenticator

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application from explicit settings (defaults to the environment)."""
    settings = settings or get_settings()
    upload_config = settings.upload_config()
    upload_config.ensure_upload_dir()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle"""
        app.state.storage = await init_storage_client(get_storage_config(upload_config))
        if not upload_config.secret:
            logger.warning("upload_secret_missing", message="UPLOAD_SECRET unset, uploads and deletes will be rejected")
        logger.info(
            "server_started",
            port=settings.PORT,
            public_host=upload_config.public_host,
            upload_dir=str(upload_config.upload_dir.resolve()),
            max_file_size=upload_config.max_file_size,
        )
        yield
        await shutdown_storage_client(app.state.storage)
        logger.info("application_shutdown")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        description="Minimal image storage service",
    )
    app.state.settings = settings
    app.state.upload_config = upload_config
    app.state.authenticator = SharedSecretAuthenticator(upload_config.secret)

    # Added last runs first: RequestID -> Logging -> CORS
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(ui_routes.router)
    app.include_router(upload_routes.router)
    app.include_router(files_routes.router)
    app.include_router(retrieval_routes.router)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check"""
        return {"status": "healthy"}

    return app


# Configure logging explicitly at the entry point, not as an import side effect elsewhere
configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        log_config=None,
    )
