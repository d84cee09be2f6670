"""
Postboard Backend — File Service Unit Tests
=============================================

What:  Tests for FileService: MIME allow-list, size limit, stored filename,
       write and cleanup.
How:   Each test gets its own temporary images directory via tmp_path.

Test Strategy:
    ✅ png / jpeg / jpg accepted, everything else rejected
    ✅ Size limit boundary at settings.max_file_size
    ✅ Filename: lower-cased, spaces → hyphens, timestamp, MIME extension
    ✅ Client-supplied directories are discarded
    ✅ Rejected uploads write nothing
"""

import os
from unittest.mock import patch

import pytest

from postboard.config import settings
from postboard.exceptions import FileStorageError, ValidationError
from postboard.services.file_service import FileService, ImageUpload


class TestMimeValidation:

    def setup_method(self):
        self.service = FileService()

    def test_png_maps_to_png(self):
        assert self.service.validate_mime_type("image/png") == "png"

    def test_jpeg_and_jpg_map_to_jpg(self):
        assert self.service.validate_mime_type("image/jpeg") == "jpg"
        assert self.service.validate_mime_type("image/jpg") == "jpg"

    def test_parameters_and_case_ignored(self):
        assert self.service.validate_mime_type("Image/PNG; charset=binary") == "png"

    @pytest.mark.parametrize("content_type", ["image/gif", "application/pdf", "text/plain", "", None])
    def test_other_types_rejected(self, content_type):
        with pytest.raises(ValidationError, match="Invalid mime type") as exc_info:
            self.service.validate_mime_type(content_type)
        assert exc_info.value.field == "image"


class TestSizeValidation:

    def setup_method(self):
        self.service = FileService()

    def test_at_limit_passes(self):
        self.service.validate_size(settings.max_file_size)

    def test_over_limit_rejected(self):
        with pytest.raises(ValidationError, match="maximum size"):
            self.service.validate_size(settings.max_file_size + 1)


class TestFilename:

    def setup_method(self):
        self.service = FileService()

    def test_lowercases_and_hyphenates(self):
        name = self.service.build_filename("My Cat.PNG", "png", timestamp_ms=1700000000000)
        assert name == "my-cat.png-1700000000000.png"

    def test_extension_follows_mime_not_client_name(self):
        name = self.service.build_filename("photo.gif", "jpg", timestamp_ms=1)
        assert name == "photo.gif-1.jpg"

    def test_directories_discarded(self):
        assert self.service.build_filename("../../etc/passwd", "png", 5) == "passwd-5.png"
        assert self.service.build_filename("C:\\Users\\me\\Pic.jpg", "jpg", 5) == "pic.jpg-5.jpg"

    def test_empty_name_falls_back(self):
        assert self.service.build_filename("", "png", 5) == "image-5.png"

    def test_timestamp_defaults_to_now(self):
        with patch("postboard.services.file_service.time.time", return_value=1700000000.5):
            assert self.service.build_filename("a", "png") == "a-1700000000500.png"

    def test_public_url(self):
        assert self.service.public_url("http://host:3000/", "a-1.png") == "http://host:3000/images/a-1.png"


class TestStorage:

    @pytest.mark.asyncio
    async def test_store_and_cleanup(self, tmp_path, png_bytes):
        service = FileService(images_root=str(tmp_path))

        path = await service.store_file(png_bytes, "a-1.png")

        assert path == str(tmp_path.resolve() / "a-1.png")
        with open(path, "rb") as f:
            assert f.read() == png_bytes

        await service.cleanup_file(path)
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_silent(self, tmp_path):
        service = FileService(images_root=str(tmp_path))
        await service.cleanup_file(str(tmp_path / "never-written.png"))

    @pytest.mark.asyncio
    async def test_store_failure_raises_storage_error(self, tmp_path, png_bytes):
        blocker = tmp_path / "not-a-dir"
        blocker.write_bytes(b"")
        service = FileService(images_root=str(blocker))

        with pytest.raises(FileStorageError):
            await service.store_file(png_bytes, "a-1.png")

    @pytest.mark.asyncio
    async def test_validate_and_store(self, tmp_path, jpeg_bytes):
        service = FileService(images_root=str(tmp_path))
        upload = ImageUpload(filename="Holiday Photo.jpeg", content_type="image/jpeg", content=jpeg_bytes)

        path, filename = await service.validate_and_store(upload)

        assert filename.startswith("holiday-photo.jpeg-")
        assert filename.endswith(".jpg")
        assert os.path.isfile(path)

    @pytest.mark.asyncio
    async def test_rejected_upload_writes_nothing(self, tmp_path):
        service = FileService(images_root=str(tmp_path))
        upload = ImageUpload(filename="anim.gif", content_type="image/gif", content=b"GIF89a")

        with pytest.raises(ValidationError):
            await service.validate_and_store(upload)

        assert list(tmp_path.iterdir()) == []
