import pytest

from rentroll.core.exceptions import StorageError
from rentroll.services.storage_service import SupabaseDocumentStorage, build_object_name


class FakeBucket:
    def __init__(self, fail=False, signed=None):
        self.fail = fail
        self.signed = signed if signed is not None else {"signedURL": "https://cdn.test/signed"}
        self.uploads = []

    def upload(self, path, file, file_options=None):
        if self.fail:
            raise RuntimeError("bucket unavailable")
        self.uploads.append((path, file, file_options))
        return {"Key": path}

    def create_signed_url(self, path, expires_in):
        if self.fail:
            raise RuntimeError("bucket unavailable")
        return self.signed


class FakeStorageApi:
    def __init__(self, bucket):
        self.bucket = bucket
        self.requested = []

    def from_(self, name):
        self.requested.append(name)
        return self.bucket


class FakeClient:
    def __init__(self, bucket):
        self.storage = FakeStorageApi(bucket)


def test_object_name_is_sanitized():
    name = build_object_name("contracts/abc", "my lease (final).pdf", now_ms=1700000000000)
    assert name == "contracts/abc/1700000000000-my_lease__final_.pdf"


async def test_upload_uses_bucket_and_returns_path():
    bucket = FakeBucket()
    storage = SupabaseDocumentStorage(bucket="docs", client=FakeClient(bucket))

    path = await storage.upload(b"data", "application/pdf", "lease.pdf", "contracts/1")

    assert path.startswith("contracts/1/")
    assert path.endswith("-lease.pdf")
    stored_path, content, options = bucket.uploads[0]
    assert stored_path == path
    assert content == b"data"
    assert options["content-type"] == "application/pdf"


async def test_upload_failure_is_storage_error():
    storage = SupabaseDocumentStorage(bucket="docs", client=FakeClient(FakeBucket(fail=True)))
    with pytest.raises(StorageError, match="upload failed"):
        await storage.upload(b"data", None, "lease.pdf", "contracts/1")


@pytest.mark.parametrize("key", ["signedURL", "signedUrl"])
async def test_signed_url_accepts_both_keys(key):
    bucket = FakeBucket(signed={key: "https://cdn.test/x"})
    storage = SupabaseDocumentStorage(bucket="docs", client=FakeClient(bucket))
    assert await storage.signed_url("contracts/1/x.pdf", 60) == "https://cdn.test/x"


async def test_signed_url_missing_is_storage_error():
    storage = SupabaseDocumentStorage(bucket="docs", client=FakeClient(FakeBucket(signed={})))
    with pytest.raises(StorageError):
        await storage.signed_url("contracts/1/x.pdf", 60)


async def test_unconfigured_storage_raises():
    storage = SupabaseDocumentStorage(url="", key="", bucket="docs")
    storage._url = ""
    storage._key = ""
    with pytest.raises(StorageError, match="not configured"):
        await storage.upload(b"data", None, "lease.pdf", "contracts/1")
