"""Upload -> ingest -> query scenarios over the in-memory stack and the example model client."""

import io
from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.api.main import create_app
from app.audit.hashing import build_payload, compute_content_hash
from app.extraction.extractor import DocumentExtractor
from app.extraction.fallback import FallbackExtractor
from app.extraction.vision import VisionOcr
from app.llm.exceptions import LlmNetworkError
from app.pdf.pymupdf_adapter import PyMuPdfAdapter
from app.vector_index.exceptions import VectorIndexError
from fakes import FakeStack


@pytest.fixture()
def loan_pdf_bytes() -> bytes:
    """Multi-page loan agreement of roughly 50KB."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter, pageCompression=0)
    c.drawString(72, 740, "Loan agreement for transaction tx-1")
    c.drawString(72, 720, "The approved loan amount is 250,000 USD at 4.2 percent")
    for page in range(12):
        for line in range(40):
            c.drawString(72, 700 - line * 16, f"Clause {page}.{line}: repayment schedule terms")
        c.showPage()
    c.save()
    return buf.getvalue()


def _upload_over_http(client: TestClient, name: str, data: bytes, transaction_id: str) -> str:
    response = client.post(
        "/api/documents/upload",
        files={"file": (name, data, "application/octet-stream")},
        data={"transactionId": transaction_id},
    )
    assert response.status_code == 201
    return response.json()["documentId"]


def _status(client: TestClient, document_id: str) -> dict:  # type: ignore[type-arg]
    response = client.get(f"/api/documents/status/{document_id}")
    assert response.status_code == 200
    return response.json()


class TestScenarios:
    def test_pdf_upload_is_processed(self, stack: FakeStack, loan_pdf_bytes: bytes) -> None:
        client = TestClient(create_app(stack.gateway()))

        document_id = _upload_over_http(client, "loan.pdf", loan_pdf_bytes, "tx-1")
        assert _status(client, document_id)["status"] == "uploaded"
        stack.workflow().run(document_id)

        status = _status(client, document_id)
        assert status["status"] == "processed"
        assert status["processingResults"]["auditRecordId"]
        assert status["processingResults"]["vectorId"]
        assert status["processingResults"]["embeddingPresent"] is True

    def test_corrupt_binary_still_processes(self, stack: FakeStack) -> None:
        client = TestClient(create_app(stack.gateway()))

        document_id = _upload_over_http(client, "dump.bin", b"\x00\xff\x13\x37" * 64, "tx-1")
        stack.workflow().run(document_id)

        results = _status(client, document_id)["processingResults"]
        assert _status(client, document_id)["status"] == "processed"
        assert results["extractionKind"] == "error-fallback"
        assert results["ocrConfidence"] == 0.1

    def test_vector_index_outage_degrades_embedding(self, stack: FakeStack) -> None:
        stack.vectors.upsert = MagicMock(  # type: ignore[method-assign]
            side_effect=VectorIndexError("ChromaDB upsert failed: unreachable")
        )
        client = TestClient(create_app(stack.gateway()))

        document_id = _upload_over_http(client, "memo.txt", b"Board memo approving the loan", "tx-1")
        stack.workflow().run(document_id)

        status = _status(client, document_id)
        assert status["status"] == "processed"
        assert status["processingResults"]["vectorId"].endswith("-fallback")
        assert status["processingResults"]["warnings"][0]["error"] == "EmbeddingUnavailable"

    def test_metadata_store_outage_during_audit_fails_document(self) -> None:
        stack = FakeStack(retry_attempts=3)
        stack.audits.append = MagicMock(  # type: ignore[method-assign]
            side_effect=ConnectionError("metadata store unreachable")
        )
        client = TestClient(create_app(stack.gateway()))

        document_id = _upload_over_http(client, "memo.txt", b"Board memo approving the loan", "tx-1")
        stack.workflow().run(document_id)

        status = _status(client, document_id)
        assert status["status"] == "failed"
        assert status["processingResults"]["error"] == "AuditWriteFailed"
        assert status["processingResults"]["failedStep"] == "audit"
        assert stack.audits.append.call_count == 3

    def test_scoped_query_returns_only_own_transaction(
        self, stack: FakeStack, loan_pdf_bytes: bytes
    ) -> None:
        client = TestClient(create_app(stack.gateway()))
        loan_id = _upload_over_http(client, "loan.pdf", loan_pdf_bytes, "tx-1")
        other_id = _upload_over_http(
            client, "other.txt", b"The approved loan amount is 90,000 EUR", "tx-2"
        )
        stack.workflow().run(loan_id)
        stack.workflow().run(other_id)

        response = client.post(
            "/api/documents/search",
            json={"query": "What is the approved loan amount?", "transactionId": "tx-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert isinstance(body["answer"], str) and body["answer"]
        source_ids = {source["documentId"] for source in body["sources"]}
        assert source_ids == {loan_id}

    def test_oversized_upload_is_rejected_before_any_record(self, stack: FakeStack) -> None:
        client = TestClient(create_app(stack.gateway(max_upload_bytes=1024)))

        response = client.post(
            "/api/documents/upload",
            files={"file": ("huge.pdf", b"%PDF" + b"0" * 2048, "application/pdf")},
            data={"transactionId": "tx-1"},
        )

        assert response.status_code == 413
        assert stack.docs.documents == {}
        assert stack.docs.jobs == {}


class TestProperties:
    @pytest.mark.parametrize(
        ("data", "name"),
        [
            (b"", ""),
            (b"", "empty.png"),
            (b"", "empty.pdf"),
            (b"\x00\x01", "weird.xyz"),
            (b"not an image", "photo.jpg"),
            (b"%PDF-1.7 broken", "scan.pdf"),
            (b"\xff\xfe", "notes.txt"),
            (b"PK\x03\x04", "archive"),
        ],
    )
    def test_extraction_never_raises(self, data: bytes, name: str) -> None:
        client = MagicMock()
        client.extract_image_text.side_effect = LlmNetworkError("down")
        extractor = DocumentExtractor(
            vision=VisionOcr(client, "vision"),
            fallback=FallbackExtractor(PyMuPdfAdapter()),
        )

        result = extractor.extract(data, name)

        assert result.text
        assert 0.0 <= result.confidence <= 1.0

    def test_audit_hash_ignores_metadata_key_order(self) -> None:
        first = build_payload("d1", "content", {"b": 1, "a": {"y": [1, 2], "x": None}}, "t")
        second = build_payload("d1", "content", {"a": {"x": None, "y": [1, 2]}, "b": 1}, "t")

        assert compute_content_hash(first) == compute_content_hash(second)

    def test_status_history_never_regresses(self, stack: FakeStack) -> None:
        gateway = stack.gateway()
        receipt, _outcome = stack.ingest(gateway, "memo.txt", b"Board memo approving the loan")

        stack.workflow().run(receipt.document_id)
        stack.docs.mark_processing(receipt.document_id)

        assert stack.docs.status_history[receipt.document_id] == [
            "uploaded",
            "processing",
            "processed",
        ]

    def test_partially_indexed_document_is_not_searchable(self, stack: FakeStack) -> None:
        gateway = stack.gateway()
        receipt, _outcome = stack.ingest(
            gateway, "memo.txt", b"Board memo approving the loan", transaction_id="tx-1"
        )
        entry = stack.search_index.entries[receipt.document_id]
        stack.search_index.entries[receipt.document_id] = replace(entry, searchable=False)

        answer = gateway.search("board memo loan", "tx-1")

        assert answer.sources == []
