"""Blob storage for rendered audio bytes."""

import uuid
from abc import ABC, abstractmethod
from pathlib import Path


class BlobStore(ABC):
    """Abstract bucket/path byte storage."""

    @abstractmethod
    def put(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Store bytes and return a URL the artifact can be fetched from."""
        pass

    @abstractmethod
    def exists(self, bucket: str, path: str) -> bool:
        pass

    @abstractmethod
    def read(self, bucket: str, path: str) -> bytes:
        pass


class LocalBlobStore(BlobStore):
    """Filesystem blob store with one directory per bucket."""

    def __init__(self, root: Path):
        self.root = root
        root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, bucket: str, path: str) -> Path:
        target = (self.root / bucket / path).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise ValueError(f"Blob path escapes storage root: {bucket}/{path}")
        return target

    def put(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(bucket, path)
        target.parent.mkdir(parents=True, exist_ok=True)

        # Write to a temp name first so readers never see a partial file
        tmp = target.with_name(f"{target.name}.{uuid.uuid4().hex}.part")
        tmp.write_bytes(data)
        tmp.replace(target)
        return target.as_uri()

    def exists(self, bucket: str, path: str) -> bool:
        return self._resolve(bucket, path).is_file()

    def read(self, bucket: str, path: str) -> bytes:
        return self._resolve(bucket, path).read_bytes()
