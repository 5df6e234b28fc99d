from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.routes import router
from app.audit.recorder import AuditRecorder
from app.config.settings import Settings
from app.database.connection import apply_schema, close_pool, init_pool, ping
from app.database.repositories.audit_repository import AuditRepository
from app.database.repositories.documents_repository import DocumentsRepository
from app.database.repositories.search_index_repository import SearchIndexRepository
from app.embedding.embedder import Embedder
from app.gateway.exceptions import GatewayError
from app.gateway.service import DocumentGateway
from app.llm.factory import LlmClientFactory
from app.logging.logger import Log
from app.rag.exceptions import QueryFailed
from app.rag.query_agent import RagQueryAgent
from app.storage.local_blob_store import LocalBlobStore
from app.vector_index.factory import VectorIndexFactory


def build_gateway(settings: Settings) -> DocumentGateway:
    """Build a DocumentGateway with all required adapters."""
    client = LlmClientFactory.create(settings)
    vector_index = VectorIndexFactory.create(settings)
    embedder = Embedder(
        client=client,
        vector_index=vector_index,
        model=settings.embedding_model_name,
    )
    query_agent = RagQueryAgent(
        embedder=embedder,
        vector_index=vector_index,
        search_index_repo=SearchIndexRepository(),
        client=client,
        model=settings.chat_model_name,
        temperature=settings.chat_temperature,
        top_k=settings.rag_top_k,
        context_max_chars=settings.rag_context_max_chars,
        snippet_chars=settings.rag_source_snippet_chars,
    )
    return DocumentGateway(
        doc_repo=DocumentsRepository(),
        blob_store=LocalBlobStore(Path(settings.storage_root)),
        query_agent=query_agent,
        audit_recorder=AuditRecorder(AuditRepository()),
        database_ping=ping,
        max_upload_bytes=settings.max_upload_bytes,
        upload_chunk_bytes=settings.upload_chunk_bytes,
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Open the connection pool, apply the schema and build the gateway unless one was injected."""
    if getattr(application.state, "gateway", None) is not None:
        yield
        return

    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    try:
        apply_schema()
        application.state.gateway = build_gateway(settings)
        Log.info(f"Document gateway started ({settings.app_env})")
        yield
    finally:
        close_pool()
        Log.info("Document gateway stopped")


async def _gateway_error(_request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def _query_failed(_request: Request, exc: QueryFailed) -> JSONResponse:
    Log.error(f"Search failed: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def _invalid_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = "; ".join(str(error.get("msg", "")) for error in exc.errors())
    return JSONResponse(status_code=400, content={"error": messages or "Invalid request"})


def create_app(gateway: DocumentGateway | None = None) -> FastAPI:
    """Build the FastAPI application.

    Run with ``uvicorn app.api.main:create_app --factory``. Passing a gateway
    skips settings, logging and pool setup.
    """
    application = FastAPI(title="Document Pipeline API", version="0.1.0", lifespan=_lifespan)
    if gateway is not None:
        application.state.gateway = gateway

    application.add_exception_handler(GatewayError, _gateway_error)
    application.add_exception_handler(QueryFailed, _query_failed)
    application.add_exception_handler(RequestValidationError, _invalid_request)
    application.include_router(router)
    return application


def serve() -> None:
    """Entry point for the API process."""
    settings = Settings()
    uvicorn.run(
        "app.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=(settings.app_env == "dev"),
    )


if __name__ == "__main__":
    serve()
