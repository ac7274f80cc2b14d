# backend/utils/blob_store.py
import os
import re
import uuid
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from config import settings

_REF_RE = re.compile(r"^[0-9a-f]{32}$")
CHUNK_SIZE = 64 * 1024


class BlobNotFoundError(FileNotFoundError):
    pass


class BlobStore:
    """Flat directory of binary blobs addressed by a generated hex reference."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _path(self, ref: str) -> Path:
        if not _REF_RE.match(ref or ""):
            raise BlobNotFoundError(f"Invalid blob reference: {ref!r}")
        return self.root / ref

    def put(self, data: bytes) -> str:
        """Write ``data`` under a fresh reference; the blob only appears once fully written."""
        self.root.mkdir(parents=True, exist_ok=True)
        ref = uuid.uuid4().hex
        final_path = self._path(ref)
        tmp_path = final_path.with_suffix(".part")
        try:
            with open(tmp_path, "wb") as buffer:
                buffer.write(data)
            os.replace(tmp_path, final_path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        return ref

    def open(self, ref: str) -> BinaryIO:
        path = self._path(ref)
        try:
            return open(path, "rb")
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob {ref} not found")

    def delete(self, ref: str) -> None:
        path = self._path(ref)
        try:
            path.unlink()
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob {ref} not found")


def iter_blob(handle: BinaryIO) -> Iterator[bytes]:
    with handle:
        while True:
            chunk = handle.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk


def get_blob_store() -> BlobStore:
    return BlobStore(settings.ATTACHMENTS_DIR)
