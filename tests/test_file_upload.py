"""
Unit tests for photo upload validation and preview encoding.

Tests file validation, size limits, format validation and the data URL preview:
- File size limits
- Supported file formats
- Invalid file detection
- Preview downscaling
"""

import base64
from io import BytesIO

from PIL import Image
from werkzeug.datastructures import FileStorage

from strain_scanner.utils.file_upload import (
    MAX_FILE_SIZE,
    PREVIEW_SIZE,
    allowed_file,
    build_preview_data_url,
    validate_image_content,
    validate_upload_file,
)


class TestAllowedFile:
    """Test filename checks."""

    def test_supported_formats(self):
        for filename in ["test.jpg", "test.jpeg", "test.png", "test.webp", "test.gif", "PHOTO.JPG"]:
            assert allowed_file(filename) is True, f"Format {filename} should be allowed"

    def test_rejects_invalid_formats(self):
        for filename in ["malware.exe", "script.js", "document.pdf", "hack.sh", "vector.svg", "noext", ""]:
            assert allowed_file(filename) is False, f"Format {filename} should be rejected"

    def test_rejects_double_extensions(self):
        for filename in ["image.php.jpg", "image.phtml.png", "image.exe.jpg", "image.js.png"]:
            assert allowed_file(filename) is False, f"{filename} should be rejected"

    def test_rejects_path_traversal(self):
        assert allowed_file("../../../etc/passwd") is False
        assert allowed_file("..\\..\\windows\\system32.png") is False
        assert allowed_file("image/../../../malicious.png") is False
        assert allowed_file("%2e%2e%2fphoto.png") is False


class TestUploadValidation:
    """Test whole-file validation."""

    def test_no_file(self):
        assert validate_upload_file(None) == (False, None, None)
        empty = FileStorage(stream=BytesIO(b""), filename="")
        assert validate_upload_file(empty) == (False, None, None)

    def test_file_size_limit(self):
        fake_file = BytesIO(b"x" * (MAX_FILE_SIZE + 1024))
        fake_file.filename = "large_image.jpg"

        is_valid, error, file_bytes = validate_upload_file(fake_file)

        assert is_valid is False
        assert "5MB" in error
        assert file_bytes is None

    def test_empty_file(self):
        fake_file = BytesIO(b"")
        fake_file.filename = "empty.jpg"

        is_valid, error, _ = validate_upload_file(fake_file)

        assert is_valid is False
        assert error is not None

    def test_valid_image_accepted(self, png_bytes):
        file = FileStorage(stream=BytesIO(png_bytes), filename="leaf.png", content_type="image/png")

        is_valid, error, file_bytes = validate_upload_file(file)

        assert is_valid is True
        assert error is None
        assert file_bytes == png_bytes

    def test_content_validation(self, png_bytes):
        assert validate_image_content(png_bytes) is True
        assert validate_image_content(b"This is not an image file") is False
        assert validate_image_content(b"\x89PNG\r\n\x1a\n" + b"corrupted" * 50) is False
        assert validate_image_content(b'<svg><script>alert("x")</script></svg>') is False
        assert validate_image_content(b"") is False


class TestPreview:
    """Test preview encoding."""

    def test_preview_is_downscaled_jpeg_data_url(self, png_bytes):
        url = build_preview_data_url(png_bytes)

        assert url.startswith("data:image/jpeg;base64,")
        raw = base64.b64decode(url.split(",", 1)[1])
        with Image.open(BytesIO(raw)) as img:
            assert img.format == "JPEG"
            assert img.width <= PREVIEW_SIZE[0]
            assert img.height <= PREVIEW_SIZE[1]

    def test_preview_handles_transparency(self):
        img = Image.new("RGBA", (50, 50), color=(0, 128, 0, 100))
        buf = BytesIO()
        img.save(buf, format="PNG")

        assert build_preview_data_url(buf.getvalue()).startswith("data:image/jpeg;base64,")
