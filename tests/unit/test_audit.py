import hashlib
from dataclasses import replace

from app.audit.hashing import build_payload, canonical_json, compute_content_hash
from app.audit.recorder import AuditRecorder
from fakes import InMemoryAuditRepository

TIMESTAMP = "2026-01-15T10:00:00+00:00"


class TestHashing:
    def test_canonical_json_sorts_keys_compactly(self) -> None:
        assert canonical_json({"b": 1, "a": "é"}) == '{"a":"é","b":1}'

    def test_hash_is_sha256_of_canonical_json(self) -> None:
        payload = build_payload("d1", "text", {"k": "v"}, TIMESTAMP)
        expected = hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
        assert compute_content_hash(payload) == expected
        assert len(expected) == 64

    def test_same_inputs_same_hash(self) -> None:
        first = build_payload("d1", "text", {"x": 1, "y": 2}, TIMESTAMP)
        second = build_payload("d1", "text", {"y": 2, "x": 1}, TIMESTAMP)
        assert compute_content_hash(first) == compute_content_hash(second)

    def test_any_field_change_changes_hash(self) -> None:
        base = compute_content_hash(build_payload("d1", "text", {}, TIMESTAMP))
        assert compute_content_hash(build_payload("d2", "text", {}, TIMESTAMP)) != base
        assert compute_content_hash(build_payload("d1", "text!", {}, TIMESTAMP)) != base
        assert compute_content_hash(build_payload("d1", "text", {"a": 1}, TIMESTAMP)) != base
        assert compute_content_hash(build_payload("d1", "text", {}, "later")) != base

    def test_payload_field_names(self) -> None:
        payload = build_payload("d1", "text", {"k": "v"}, TIMESTAMP)
        assert set(payload) == {"documentId", "content", "metadata", "timestamp"}


class TestAuditRecorder:
    def test_records_hash_of_payload(self) -> None:
        repo = InMemoryAuditRepository()
        recorder = AuditRecorder(repo)

        record = recorder.record("d1", "Invoice text", {"vendor": "ACME"}, TIMESTAMP)

        assert record.content_hash == compute_content_hash(record.payload)
        assert record.payload["content"] == "Invoice text"
        assert record.created_at is not None
        assert repo.records == [record]

    def test_rerecording_same_content_is_idempotent(self) -> None:
        repo = InMemoryAuditRepository()
        recorder = AuditRecorder(repo)

        first = recorder.record("d1", "Invoice text", {}, TIMESTAMP)
        second = recorder.record("d1", "Invoice text", {}, TIMESTAMP)

        assert first == second
        assert len(repo.records) == 1

    def test_latest_returns_most_recent(self) -> None:
        repo = InMemoryAuditRepository()
        recorder = AuditRecorder(repo)
        recorder.record("d1", "v1", {}, TIMESTAMP)
        newer = recorder.record("d1", "v2", {}, TIMESTAMP)

        assert recorder.latest("d1") == newer
        assert recorder.latest("other") is None

    def test_verify_detects_tampering(self) -> None:
        recorder = AuditRecorder(InMemoryAuditRepository())
        record = recorder.record("d1", "Invoice text", {}, TIMESTAMP)

        tampered = replace(record, payload={**record.payload, "content": "Edited"})

        assert AuditRecorder.verify(record)
        assert not AuditRecorder.verify(tampered)
