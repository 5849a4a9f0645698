"""
Local-disk blob storage.

Each bucket is a directory under the configured storage root. Files are
addressed by a relative path inside the bucket and served read-only from
/storage, which is what get_public_url points at. Disk I/O is blocking, so
every operation runs in a worker thread.
"""

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional

from app.errors import DownloadFailure, UploadFailure

logger = logging.getLogger(__name__)


class BlobStorage:
    def __init__(self, root: str | Path, bucket: str, public_base_url: str):
        self.bucket = bucket
        self.base_dir = (Path(root) / bucket).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.base_dir / path).resolve()
        if target != self.base_dir and self.base_dir not in target.parents:
            raise ValueError(f"Path escapes bucket {self.bucket}: {path}")
        return target

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        upsert: bool = False,
    ) -> str:
        """Store data at path and return the stored path."""

        def _write() -> None:
            target = self._resolve(path)
            if target.exists() and not upsert:
                raise FileExistsError(f"{path} already exists")
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except (OSError, ValueError) as e:
            raise UploadFailure(f"Failed to upload file: {e}") from e
        logger.info("Stored %s/%s (%d bytes, %s)", self.bucket, path, len(data), content_type)
        return path

    async def download(self, path: str) -> bytes:
        try:
            return await asyncio.to_thread(lambda: self._resolve(path).read_bytes())
        except (OSError, ValueError) as e:
            raise DownloadFailure(f"Failed to download file: {e}") from e

    async def remove(self, paths: Iterable[str]) -> None:
        """Delete every path; paths that do not exist are ignored."""

        def _remove(items: list) -> None:
            for item in items:
                self._resolve(item).unlink(missing_ok=True)

        await asyncio.to_thread(_remove, list(paths))

    def get_public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{path}"


def path_from_public_url(url: str) -> Optional[str]:
    """Last path segment of a public URL, without any query string."""
    name = url.split("?")[0].rstrip("/").split("/")[-1]
    return name or None
