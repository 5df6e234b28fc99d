import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import apply_schema, close_pool, get_connection, init_pool
from app.database.models import JOB_PENDING, Document, JobRecord
from app.database.repositories.documents_repository import DocumentsRepository
from app.storage.local_blob_store import LocalBlobStore, document_blob_path


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docpipe_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    """Collects document ids; their rows are removed from every table afterwards."""
    document_ids: list[str] = []
    yield document_ids
    if not document_ids:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, column in (
                ("search_index", "document_id"),
                ("audit_records", "document_id"),
                ("workflow_checkpoints", "document_id"),
                ("ingestion_jobs", "document_id"),
                ("documents", "id"),
            ):
                cur.execute(
                    f"DELETE FROM {table} WHERE {column} = ANY(%s::uuid[])",
                    (document_ids,),
                )
        conn.commit()


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def seed_document(
    integration_cleanup: list[str],
    files_root: Path,
    sample_pdf_bytes: bytes,
) -> tuple[Document, str]:
    """Uploaded PDF on disk plus its documents row and pending job."""
    document_id = str(uuid.uuid4())
    job_id = str(uuid.uuid4())
    storage_path = document_blob_path(document_id, "invoice.pdf")
    LocalBlobStore(files_root).put(storage_path, sample_pdf_bytes)
    document = Document(
        id=document_id,
        original_name="invoice.pdf",
        storage_path=storage_path,
        content_type="application/pdf",
        size_bytes=len(sample_pdf_bytes),
        transaction_id="tx-integration",
        metadata={"vendor": "ACME"},
    )
    DocumentsRepository().create_with_job(document, job_id)
    integration_cleanup.append(document_id)
    return document, job_id


@pytest.fixture
def seed_job(seed_document: tuple[Document, str]) -> JobRecord:
    document, job_id = seed_document
    return JobRecord(id=job_id, document_id=document.id, status=JOB_PENDING, attempts=0)
