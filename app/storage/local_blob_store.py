from collections.abc import Iterator
from pathlib import Path

from app.storage.base import BaseBlobStore
from app.storage.exceptions import BlobNotFoundError, BlobStoreError


def document_blob_path(document_id: str, file_name: str) -> str:
    """Build the object path for an upload: documents/{document_id}/{file_name}"""
    return f"documents/{document_id}/{file_name}"


class LocalBlobStore(BaseBlobStore):
    """Stores blobs as files below a root directory."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def put(self, path: str, data: bytes) -> None:
        target = self._resolve_path(path)
        tmp = target.with_name(f".{target.name}.partial")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            tmp.replace(target)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise BlobStoreError(f"Failed to write blob {path}: {exc}") from exc

    def read(self, path: str) -> bytes:
        target = self._existing_path(path)
        return target.read_bytes()

    def stream(self, path: str, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        target = self._existing_path(path)
        return self._iter_file(target, chunk_size)

    def delete(self, path: str) -> None:
        self._resolve_path(path).unlink(missing_ok=True)

    def is_available(self) -> bool:
        try:
            self._files_root.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return self._files_root.is_dir()

    @staticmethod
    def _iter_file(target: Path, chunk_size: int) -> Iterator[bytes]:
        with target.open("rb") as handle:
            while True:
                chunk = handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def _existing_path(self, path: str) -> Path:
        target = self._resolve_path(path)
        if not target.is_file():
            raise BlobNotFoundError(f"Blob not found: {path}")
        return target

    def _resolve_path(self, path: str) -> Path:
        root = self._files_root.resolve()
        target = (root / path).resolve()
        if root not in target.parents:
            raise BlobStoreError(f"Blob path escapes storage root: {path}")
        return target
