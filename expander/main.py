from fastapi import FastAPI

from expander.api.routes.composition import router as composition_router
from expander.api.routes.health import router as health_router
from expander.api.routes.sessions import API_PREFIX
from expander.api.routes.sessions import router as sessions_router
from expander.api.routes.ui import router as ui_router
from expander.config import settings
from expander.logging_setup import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(composition_router, prefix=API_PREFIX)
    app.include_router(sessions_router, prefix=API_PREFIX)
    app.include_router(ui_router)
    return app


app = create_app()
