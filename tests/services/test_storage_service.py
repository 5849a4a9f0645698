"""Tests for the local blob storage."""

import pytest

from app.errors import DownloadFailure, UploadFailure
from app.services.storage_service import BlobStorage, path_from_public_url


@pytest.mark.asyncio
async def test_upload_then_download(documents_bucket, tmp_path):
    path = await documents_bucket.upload("user-1/file.txt", b"payload", content_type="text/plain")

    assert path == "user-1/file.txt"
    assert (tmp_path / "documents" / "user-1" / "file.txt").read_bytes() == b"payload"
    assert await documents_bucket.download(path) == b"payload"


@pytest.mark.asyncio
async def test_upload_refuses_to_overwrite_without_upsert(documents_bucket):
    await documents_bucket.upload("a.txt", b"one")

    with pytest.raises(UploadFailure):
        await documents_bucket.upload("a.txt", b"two")

    await documents_bucket.upload("a.txt", b"two", upsert=True)
    assert await documents_bucket.download("a.txt") == b"two"


@pytest.mark.asyncio
async def test_download_missing_file(documents_bucket):
    with pytest.raises(DownloadFailure):
        await documents_bucket.download("nope/missing.pdf")


@pytest.mark.asyncio
async def test_remove_ignores_missing_paths(documents_bucket):
    await documents_bucket.upload("keep.txt", b"k")
    await documents_bucket.upload("drop.txt", b"d")

    await documents_bucket.remove(["drop.txt", "never-existed.txt"])

    assert await documents_bucket.download("keep.txt") == b"k"
    with pytest.raises(DownloadFailure):
        await documents_bucket.download("drop.txt")


@pytest.mark.asyncio
async def test_paths_cannot_escape_the_bucket(documents_bucket):
    with pytest.raises(UploadFailure):
        await documents_bucket.upload("../podcasts/evil.txt", b"x")
    with pytest.raises(DownloadFailure):
        await documents_bucket.download("../../etc/passwd")


def test_public_url(tmp_path):
    bucket = BlobStorage(tmp_path, "documents", "https://cdn.example.com/storage/")

    assert bucket.get_public_url("u/f.pdf") == "https://cdn.example.com/storage/documents/u/f.pdf"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://cdn.example.com/storage/podcasts/episode.mp3", "episode.mp3"),
        ("https://cdn.example.com/storage/podcasts/episode.mp3?token=abc", "episode.mp3"),
        ("https://cdn.example.com/", "cdn.example.com"),
        ("", None),
    ],
)
def test_path_from_public_url(url, expected):
    assert path_from_public_url(url) == expected
