"""Content-addressed digests for audit records.

The digest is SHA-256 over the canonical JSON encoding of the payload
(sorted keys, compact separators, UTF-8), so it is a pure function of the
payload and can be recomputed from a stored record.
"""

import hashlib
import json
from typing import Any


def canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def compute_content_hash(payload: dict[str, Any]) -> str:
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()


def build_payload(
    document_id: str,
    text: str,
    metadata: dict[str, Any],
    timestamp: str,
) -> dict[str, Any]:
    """Assemble the hashed material for one document.

    Metadata is normalized through a JSON round-trip so the payload hashes the
    same before and after it has been stored.
    """
    return {
        "documentId": document_id,
        "content": text,
        "metadata": json.loads(canonical_json(metadata or {})),
        "timestamp": timestamp,
    }
