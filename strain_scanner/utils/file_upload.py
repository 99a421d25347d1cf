"""
Photo upload validation and preview encoding.

The scanner lets a user snap or pick a photo of a plant and shows it next to
the search box. Nothing is stored: the validated image is downscaled with
Pillow and handed back to the page as a data: URL.
"""

from __future__ import annotations
import base64
from io import BytesIO
from typing import Any, Optional, Tuple

from PIL import Image, ImageOps

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}

# Rejected anywhere in a filename, not only as the final extension
DANGEROUS_EXTENSIONS = {
    "php", "php3", "php4", "php5", "phtml", "exe", "sh", "bat", "cmd",
    "js", "py", "pl", "cgi", "asp", "aspx", "jsp", "html", "htm", "svg",
}

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
PREVIEW_SIZE = (400, 300)
PREVIEW_QUALITY = 80


def allowed_file(filename: str | None) -> bool:
    """
    Check a client-supplied filename.

    Rejects path separators, traversal and URL-encoded sequences, and any
    double extension that hides an executable type (e.g. image.php.jpg).
    """
    if not filename:
        return False
    if "/" in filename or "\\" in filename or ".." in filename or "%" in filename:
        return False

    parts = filename.lower().split(".")
    if len(parts) < 2 or not parts[0]:
        return False
    if parts[-1] not in ALLOWED_EXTENSIONS:
        return False
    return not any(part in DANGEROUS_EXTENSIONS for part in parts[1:-1])


def validate_image_content(content: bytes) -> bool:
    """Return True only if Pillow can identify and verify the bytes as an image."""
    if not content:
        return False
    try:
        with Image.open(BytesIO(content)) as img:
            img.verify()
        return True
    except Exception:  # Pillow raises a variety of types for malformed data
        return False


def validate_upload_file(file: Any) -> Tuple[bool, Optional[str], Optional[bytes]]:
    """
    Validate an uploaded file (werkzeug FileStorage or any object with
    .filename and .read()).

    Returns:
        (is_valid, error_message, file_bytes)
        - No file provided: (False, None, None)
        - Invalid file:     (False, "reason", None)
        - Valid file:       (True, None, bytes)
    """
    if file is None or not getattr(file, "filename", ""):
        return False, None, None

    if not allowed_file(file.filename):
        return False, "Unsupported file type. Please upload a PNG, JPG, GIF or WebP image.", None

    file_bytes = file.read(MAX_FILE_SIZE + 1)
    if len(file_bytes) > MAX_FILE_SIZE:
        return False, "Image must be less than 5MB.", None

    if not validate_image_content(file_bytes):
        return False, "The file does not appear to be a valid image.", None

    return True, None, file_bytes


def build_preview_data_url(file_bytes: bytes) -> str:
    """
    Downscale a validated image to fit PREVIEW_SIZE and return it as a
    base64 JPEG data URL. Phone photos are rotated per their EXIF tag first.
    """
    with Image.open(BytesIO(file_bytes)) as img:
        img = ImageOps.exif_transpose(img)
        img = img.convert("RGB")
        img.thumbnail(PREVIEW_SIZE)
        out = BytesIO()
        img.save(out, format="JPEG", quality=PREVIEW_QUALITY, optimize=True)

    encoded = base64.b64encode(out.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"
