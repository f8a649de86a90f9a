import pytest

from modules.storage.service import StorageService, encode_body
from modules.storage.interfaces import IStorageService
from modules.storage.models import DEFAULT_MIME_TYPE, TEXT_MIME_TYPE
from modules.storage.exceptions import (
    BucketExistsError,
    BucketNotFoundError,
    ObjectNotFoundError,
    ResourceExistsError,
)


class TestStorageService:
    @pytest.fixture
    def current_user(self):
        return {"id": None}

    @pytest.fixture
    def service(self, settings, latency, faults, current_user):
        return StorageService(settings, latency, faults, user_id_provider=lambda: current_user["id"])

    def test_implements_interface(self, service):
        assert isinstance(service, IStorageService)

    def test_encode_body(self):
        assert encode_body("hé") == ("aMOp", 3)
        assert encode_body(b"\x00\x01") == ("AAE=", 2)

    # Upload / download

    @pytest.mark.asyncio
    async def test_upload_then_download(self, service):
        bucket = service.from_("avatars")

        upload = await bucket.upload("u1/avatar.png", b"\x89PNG", content_type="image/png")
        download = await bucket.download("u1/avatar.png")

        assert upload.data == {"path": "u1/avatar.png"}
        assert download.data == b"\x89PNG"
        stored = service.get_files("avatars")[0]
        assert stored.mime_type == "image/png"
        assert stored.size == 4
        assert stored.name == "avatar.png"

    @pytest.mark.asyncio
    async def test_text_upload_defaults_to_text_mime_type(self, service):
        await service.from_("uploads").upload("notes.txt", "hello")
        await service.from_("uploads").upload("blob.bin", b"hello")

        types = {f.path: f.mime_type for f in service.get_files("uploads")}
        assert types == {"notes.txt": TEXT_MIME_TYPE, "blob.bin": DEFAULT_MIME_TYPE}

    @pytest.mark.asyncio
    async def test_upload_conflict_without_upsert(self, service):
        bucket = service.from_("uploads")
        await bucket.upload("a.txt", "one")

        response = await bucket.upload("a.txt", "two")

        assert isinstance(response.error, ResourceExistsError)
        assert response.error.message == "The resource already exists"
        assert (await bucket.download("a.txt")).data == b"one"

    @pytest.mark.asyncio
    async def test_upload_upsert_replaces_content_and_keeps_identity(self, service):
        bucket = service.from_("uploads")
        await bucket.upload("a.txt", "one")
        original = service.get_files("uploads")[0]

        response = await bucket.upload("a.txt", "two", upsert=True)

        replaced = service.get_files("uploads")[0]
        assert response.ok
        assert (await bucket.download("a.txt")).data == b"two"
        assert replaced.id == original.id
        assert replaced.created_at == original.created_at

    @pytest.mark.asyncio
    async def test_upload_records_signed_in_user(self, service, current_user):
        current_user["id"] = "user-42"
        await service.from_("uploads").upload("doc.txt", "x")
        assert service.get_files()[0].user_id == "user-42"

    @pytest.mark.asyncio
    async def test_download_missing(self, service):
        response = await service.from_("uploads").download("missing.txt")
        assert isinstance(response.error, ObjectNotFoundError)
        assert response.error.message == "Object not found"

    @pytest.mark.asyncio
    async def test_same_path_in_different_buckets(self, service):
        await service.from_("a").upload("f.txt", "in a")
        await service.from_("b").upload("f.txt", "in b")
        assert (await service.from_("a").download("f.txt")).data == b"in a"
        assert (await service.from_("b").download("f.txt")).data == b"in b"

    # Remove / list

    @pytest.mark.asyncio
    async def test_remove_reports_only_existing_paths(self, service):
        bucket = service.from_("uploads")
        await bucket.upload("a.txt", "a")

        response = await bucket.remove(["a.txt", "ghost.txt"])

        assert response.data == [{"path": "a.txt"}]
        assert service.get_files("uploads") == []

    @pytest.mark.asyncio
    async def test_list_by_prefix_with_paging(self, service):
        bucket = service.from_("uploads")
        for name in ("u1/a.txt", "u1/b.txt", "u1/c.txt", "u2/d.txt"):
            await bucket.upload(name, "x")

        listed = await bucket.list("u1/")
        paged = await bucket.list("u1/", limit=1, offset=1)

        assert [entry.name for entry in listed.data] == ["a.txt", "b.txt", "c.txt"]
        assert listed.data[0].metadata["size"] == 1
        assert [entry.name for entry in paged.data] == ["b.txt"]

    # URLs

    def test_public_url(self, service, settings):
        url = service.from_("public").get_public_url("img/logo.png")
        assert url == f"{settings.emulator_storage_url}/public/img/logo.png"

    @pytest.mark.asyncio
    async def test_signed_url(self, service):
        response = await service.from_("public").create_signed_url("img/logo.png", 60)
        assert "/public/img/logo.png?token=mock-signed-" in response.data["signed_url"]
        assert response.data["signed_url"].endswith("&expires=60")

    # Buckets

    @pytest.mark.asyncio
    async def test_default_buckets(self, service):
        response = await service.list_buckets()
        assert [b.name for b in response.data] == ["avatars", "uploads", "public"]

    @pytest.mark.asyncio
    async def test_create_and_delete_bucket(self, service):
        assert (await service.create_bucket("docs", public=True)).ok
        assert isinstance((await service.create_bucket("docs")).error, BucketExistsError)

        await service.from_("docs").upload("a.txt", "a")
        assert (await service.delete_bucket("docs")).ok

        assert service.get_files("docs") == []
        assert isinstance((await service.delete_bucket("docs")).error, BucketNotFoundError)

    # Faults and helpers

    @pytest.mark.asyncio
    async def test_injected_fault(self, service, faults):
        error = RuntimeError("quota exceeded")
        faults.set("storage", "avatars.upload", error)

        response = await service.from_("avatars").upload("a.png", b"x")

        assert response.error is error
        assert service.get_files() == []

    def test_seed_and_delete_files_for_user(self, service):
        service.seed([
            {"bucket": "avatars", "path": "user-1/a.png", "data": b"a"},
            {"bucket": "uploads", "path": "shared.txt", "data": "s", "user_id": "user-1"},
            {"bucket": "uploads", "path": "other.txt", "data": "o", "user_id": "user-2"},
        ])

        assert service.delete_files_for_user("user-1") == 2
        assert [f.path for f in service.get_files()] == ["other.txt"]

    def test_reset_restores_default_buckets(self, service):
        service.from_("extra")
        service.seed([{"bucket": "extra", "path": "x", "data": "x"}])

        service.reset()

        assert service.get_files() == []
        assert list(service.buckets) == ["avatars", "uploads", "public"]
