from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookburst.api.v1.router import api_router
from bookburst.core.config import get_settings
from bookburst.core.db import check_database_connection, engine, init_models
from bookburst.core.errors import register_exception_handlers
from bookburst.logging.setup import get_logger, setup_logging
from bookburst.middlewares.logging_middleware import LoggingMiddleware

settings = get_settings()
logger = get_logger("bookburst.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup and release the pool on shutdown."""
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.APP_ENV})")
    if settings.DB_AUTO_CREATE_TABLES:
        await init_models()
    yield
    await engine.dispose()
    logger.info(f"Shutting down {settings.PROJECT_NAME}")


def create_app() -> FastAPI:
    """Build the application with its middleware, handlers and routers."""
    setup_logging()

    app = FastAPI(lifespan=lifespan, **settings.fastapi_kwargs)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    if settings.LOG_REQUESTS:
        app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check():
        database_ok = await check_database_connection()
        return {
            "status": "ok" if database_ok else "degraded",
            "database": "connected" if database_ok else "unavailable",
            "version": settings.PROJECT_VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookburst.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )
