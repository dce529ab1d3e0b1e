from __future__ import annotations

from fastapi import APIRouter

from family_trips.modules.documents.api import router as documents_router
from family_trips.modules.suggestions.api import router as suggestions_router

router = APIRouter()

router.include_router(suggestions_router, prefix="/api")
router.include_router(documents_router, prefix="/api")


@router.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
