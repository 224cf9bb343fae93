import uvicorn
from fastapi import FastAPI

from app.api.routes.energy import router as energy_router
from app.api.routes.health import router as health_router
from app.api.routes.internal_tournaments import router as internal_tournaments_router
from app.api.routes.quiz import router as quiz_router
from app.api.routes.tournaments import router as tournaments_router
from app.core.config import get_settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Quiz Tournaments API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(health_router)
    app.include_router(quiz_router)
    app.include_router(energy_router)
    app.include_router(tournaments_router)
    app.include_router(internal_tournaments_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
