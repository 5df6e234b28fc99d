"""HTTP surface of the document gateway.

Handlers are plain ``def`` functions: the gateway talks to PostgreSQL and the
blob store synchronously, so FastAPI runs each request in its threadpool.
"""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse

from app.api.schemas import (
    AuditResponse,
    ErrorResponse,
    HealthResponse,
    SearchRequest,
    SearchResponse,
    SourceResponse,
    StatusResponse,
    UploadResponse,
)
from app.gateway.exceptions import ValidationError
from app.gateway.service import DocumentGateway

DOWNLOAD_CACHE_CONTROL = "private, max-age=3600"

router = APIRouter(prefix="/api")


def _get_gateway(request: Request) -> DocumentGateway:
    return request.app.state.gateway


GatewayDep = Annotated[DocumentGateway, Depends(_get_gateway)]


def _parse_metadata(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        metadata = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid metadata JSON: {exc.msg}") from exc
    if not isinstance(metadata, dict):
        raise ValidationError("Metadata must be a JSON object")
    return metadata


@router.post(
    "/documents/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
def upload_document(
    gateway: GatewayDep,
    file: Annotated[UploadFile | None, File()] = None,
    transaction_id: Annotated[str | None, Form(alias="transactionId")] = None,
    metadata: Annotated[str | None, Form()] = None,
) -> UploadResponse:
    if file is None:
        raise ValidationError("No file provided")
    receipt = gateway.upload(
        file.file,
        file.filename,
        content_type=file.content_type,
        transaction_id=transaction_id,
        metadata=_parse_metadata(metadata),
    )
    return UploadResponse(
        document_id=receipt.document_id,
        workflow_id=receipt.workflow_id,
        status=receipt.status,
    )


@router.get(
    "/documents/status/{document_id}",
    response_model=StatusResponse,
    responses={404: {"model": ErrorResponse}},
)
def document_status(document_id: str, gateway: GatewayDep) -> StatusResponse:
    document = gateway.status(document_id)
    return StatusResponse(
        document_id=document.id,
        file_name=document.original_name,
        transaction_id=document.transaction_id,
        status=document.status,
        metadata=document.metadata,
        processing_results=document.processing_results,
        created_at=document.created_at,
        updated_at=document.updated_at,
    )


@router.post(
    "/documents/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def search_documents(body: SearchRequest, gateway: GatewayDep) -> SearchResponse:
    answer = gateway.search(body.query, body.transaction_id)
    return SearchResponse(
        answer=answer.answer,
        sources=[
            SourceResponse(
                document_id=source.document_id,
                confidence=source.confidence,
                snippet=source.snippet,
            )
            for source in answer.sources
        ],
        confidence=answer.confidence,
    )


@router.get(
    "/documents/download/{document_id}",
    response_class=StreamingResponse,
    responses={404: {"model": ErrorResponse}},
)
def download_document(document_id: str, gateway: GatewayDep) -> StreamingResponse:
    document, body = gateway.download(document_id)
    file_name = document.original_name.replace('"', "")
    return StreamingResponse(
        body,
        media_type=document.content_type,
        headers={
            "Content-Disposition": f'inline; filename="{file_name}"',
            "Cache-Control": DOWNLOAD_CACHE_CONTROL,
        },
    )


@router.get(
    "/documents/{document_id}/audit",
    response_model=AuditResponse,
    responses={404: {"model": ErrorResponse}},
)
def document_audit(document_id: str, gateway: GatewayDep) -> AuditResponse:
    record, verified = gateway.audit(document_id)
    return AuditResponse(
        document_id=record.document_id,
        content_hash=record.content_hash,
        created_at=record.created_at,
        verified=verified,
    )


@router.get("/health", response_model=HealthResponse)
def health(gateway: GatewayDep) -> JSONResponse:
    report = gateway.health()
    payload = HealthResponse(
        status=report.status,
        storage_connected=report.storage_connected,
        timestamp=report.timestamp,
    )
    return JSONResponse(
        status_code=200 if report.healthy else 503,
        content=payload.model_dump(by_alias=True),
    )
