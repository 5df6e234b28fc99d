import io
from unittest.mock import MagicMock

import pytest

from app.gateway.exceptions import NotFoundError, PayloadTooLargeError, ValidationError
from app.gateway.service import safe_file_name
from fakes import FakeStack


class TestSafeFileName:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("invoice.pdf", "invoice.pdf"),
            ("../../etc/passwd", "passwd"),
            ("C:\\Users\\me\\scan.png", "scan.png"),
            ("scan\x00.png", "scan.png"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_strips_directories(self, raw: str | None, expected: str) -> None:
        assert safe_file_name(raw) == expected


class TestUpload:
    def test_stores_blob_and_document(self, stack: FakeStack) -> None:
        gateway = stack.gateway()

        receipt = gateway.upload(
            io.BytesIO(b"Invoice 1042"),
            "invoice.txt",
            content_type="text/plain",
            transaction_id="tx-1",
            metadata={"vendor": "ACME"},
        )

        assert receipt.status == "processing"
        assert receipt.workflow_id != receipt.document_id
        document = stack.docs.find_by_id(receipt.document_id)
        assert document.status == "uploaded"
        assert document.storage_path == f"documents/{receipt.document_id}/invoice.txt"
        assert document.size_bytes == 12
        assert document.transaction_id == "tx-1"
        assert document.metadata == {"vendor": "ACME"}
        assert stack.blobs.blobs[document.storage_path] == b"Invoice 1042"
        assert stack.docs.jobs[receipt.workflow_id] == receipt.document_id

    def test_missing_file_name_is_rejected(self, stack: FakeStack) -> None:
        with pytest.raises(ValidationError):
            stack.gateway().upload(io.BytesIO(b"data"), "")

    @pytest.mark.parametrize(
        "metadata",
        [{"note": "a\x00b"}, {"a\x00": 1}, {"tags": ["ok", {"deep": "\x00"}]}],
    )
    def test_nul_in_metadata_is_rejected(self, stack: FakeStack, metadata: dict) -> None:
        with pytest.raises(ValidationError, match="NUL"):
            stack.gateway().upload(io.BytesIO(b"data"), "memo.txt", metadata=metadata)

        assert stack.docs.documents == {}
        assert stack.blobs.blobs == {}

    def test_nul_in_transaction_id_is_rejected(self, stack: FakeStack) -> None:
        with pytest.raises(ValidationError, match="NUL"):
            stack.gateway().upload(io.BytesIO(b"data"), "memo.txt", transaction_id="tx\x001")

    def test_oversized_upload_writes_nothing(self, stack: FakeStack) -> None:
        gateway = stack.gateway(max_upload_bytes=4096)

        with pytest.raises(PayloadTooLargeError):
            gateway.upload(io.BytesIO(b"x" * 4097), "big.txt")

        assert stack.docs.documents == {}
        assert stack.blobs.blobs == {}

    def test_upload_at_limit_is_accepted(self, stack: FakeStack) -> None:
        gateway = stack.gateway(max_upload_bytes=4096)

        receipt = gateway.upload(io.BytesIO(b"x" * 4096), "exact.txt")

        assert stack.docs.find_by_id(receipt.document_id).size_bytes == 4096

    def test_oversized_stream_is_not_read_past_limit(self, stack: FakeStack) -> None:
        gateway = stack.gateway(max_upload_bytes=2048)
        stream = MagicMock()
        stream.read.return_value = b"x" * 1024

        with pytest.raises(PayloadTooLargeError):
            gateway.upload(stream, "endless.bin")

        assert stream.read.call_count == 3

    def test_record_failure_removes_blob(self, stack: FakeStack) -> None:
        gateway = stack.gateway()
        stack.docs.create_with_job = MagicMock(side_effect=RuntimeError("db down"))  # type: ignore[method-assign]

        with pytest.raises(RuntimeError):
            gateway.upload(io.BytesIO(b"data"), "invoice.txt")

        assert stack.blobs.blobs == {}


class TestLookups:
    def test_status_of_unknown_document(self, stack: FakeStack) -> None:
        with pytest.raises(NotFoundError):
            stack.gateway().status("missing")

    def test_download_streams_blob(self, stack: FakeStack) -> None:
        gateway = stack.gateway()
        data = b"0123456789" * 300
        receipt = gateway.upload(io.BytesIO(data), "notes.txt", content_type="text/plain")

        document, body = gateway.download(receipt.document_id)

        assert document.content_type == "text/plain"
        assert b"".join(body) == data

    def test_download_with_missing_blob(self, stack: FakeStack) -> None:
        gateway = stack.gateway()
        receipt = gateway.upload(io.BytesIO(b"data"), "notes.txt")
        stack.blobs.blobs.clear()

        with pytest.raises(NotFoundError, match="File not found"):
            gateway.download(receipt.document_id)

    def test_audit_of_processed_document_verifies(self, stack: FakeStack) -> None:
        gateway = stack.gateway()
        receipt, _outcome = stack.ingest(gateway, "invoice.txt", b"Invoice 1042 total due")

        record, verified = gateway.audit(receipt.document_id)

        assert verified
        assert record.document_id == receipt.document_id

    def test_audit_before_processing(self, stack: FakeStack) -> None:
        gateway = stack.gateway()
        receipt = gateway.upload(io.BytesIO(b"data"), "notes.txt")

        with pytest.raises(NotFoundError, match="Audit record"):
            gateway.audit(receipt.document_id)


class TestSearch:
    def test_blank_query_is_rejected(self, stack: FakeStack) -> None:
        with pytest.raises(ValidationError):
            stack.gateway().search("  ")

    def test_forwards_to_agent(self, stack: FakeStack) -> None:
        gateway = stack.gateway()
        stack.ingest(
            gateway, "invoice.txt", b"Invoice 1042 total amount due", transaction_id="tx-1"
        )

        answer = gateway.search("invoice amount due", "tx-1")

        assert len(answer.sources) == 1


class TestHealth:
    def test_healthy(self, stack: FakeStack) -> None:
        report = stack.gateway().health()
        assert report.status == "healthy"
        assert report.storage_connected
        assert report.timestamp

    def test_database_down(self, stack: FakeStack) -> None:
        def ping() -> bool:
            raise ConnectionError("refused")

        report = stack.gateway(ping=ping).health()

        assert report.status == "unhealthy"
        assert not report.storage_connected

    def test_blob_store_unavailable(self, stack: FakeStack) -> None:
        stack.blobs.available = False
        assert stack.gateway().health().status == "unhealthy"
