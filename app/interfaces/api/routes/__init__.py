from fastapi import FastAPI

from .health import router as health_router
from .push import router as push_router


def register_routes(app: FastAPI) -> None:
    """Registra todos los routers de la API en la aplicación FastAPI."""

    app.include_router(health_router)
    app.include_router(push_router)
