from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.api.routes.search import router as search_router


def create_app() -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # tighten later
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    app.include_router(search_router, prefix="/api", tags=["search"])

    return app

app = create_app()
