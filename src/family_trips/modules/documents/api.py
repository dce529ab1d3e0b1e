from __future__ import annotations

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from family_trips.core.config import settings
from family_trips.core.logging import get_logger, log_event
from family_trips.modules.documents.schemas import DocumentParseOut, ParseDocumentTextIn
from family_trips.modules.documents.service import (
    UnsupportedDocumentError,
    extract_document_text,
    parse_travel_document,
)

router = APIRouter(tags=["documents"])
logger = get_logger(__name__)


@router.post("/documents/parse", response_model=DocumentParseOut)
async def parse_document(
    upload: UploadFile = File(...),
    home_country: str | None = Form(default=None),
) -> DocumentParseOut:
    body = await upload.read()
    filename = upload.filename or "upload.bin"
    log_event(
        logger,
        "upload.received",
        filename=filename,
        content_type=upload.content_type,
        byte_size=len(body),
    )
    if len(body) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File is too large"
        )

    try:
        text = await run_in_threadpool(
            extract_document_text,
            filename=filename,
            content_type=upload.content_type,
            body=body,
        )
    except UnsupportedDocumentError as e:
        log_event(logger, "upload.rejected", filename=filename, reason=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    result = await run_in_threadpool(parse_travel_document, text, home_country)
    return DocumentParseOut.from_result(result)


@router.post("/documents/parse-text", response_model=DocumentParseOut)
def parse_document_text(payload: ParseDocumentTextIn) -> DocumentParseOut:
    if not payload.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text is required")
    result = parse_travel_document(payload.text, payload.home_country)
    return DocumentParseOut.from_result(result)
