from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from family_trips.api.router import router as api_router
from family_trips.core.config import settings
from family_trips.core.logging import RequestContextMiddleware, configure_logging


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Family Trips", version="0.1.0")
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)
    return app


app = create_app()
