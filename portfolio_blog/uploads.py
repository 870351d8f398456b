"""
Upload validation gate and image upload helpers.

validate_upload() is a cheap first check on the declared type and size of
a file. It runs before anything is sent to storage; the storage backend
stays responsible for its own enforcement.
"""
import io
import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .conf import blog_settings
from .documents import HeroImage
from .exceptions import UploadRejected
from .storage import DjangoStorageBackend, content_addressed_path

logger = logging.getLogger(__name__)

TYPE = "type"
SIZE = "size"
UNREADABLE = "unreadable"


@dataclass(frozen=True)
class UploadDescriptor:
    """What the gate needs to know about a file."""

    name: str
    content_type: str
    size: int

    @classmethod
    def from_file(cls, uploaded_file):
        """Describe a Django UploadedFile (or any object with name and size)."""
        name = os.path.basename(getattr(uploaded_file, "name", "") or "")
        content_type = getattr(uploaded_file, "content_type", "") or mimetypes.guess_type(name)[0] or ""
        return cls(name=name, content_type=content_type, size=uploaded_file.size)

    @property
    def human_size(self):
        return f"{self.size / 1024 / 1024:.2f}MB"


@dataclass(frozen=True)
class UploadValidation:
    valid: bool
    reason: Optional[str] = None
    code: Optional[str] = None


def validate_upload(descriptor):
    """
    Check a file's declared type, then its size.

    The first failing check decides the reason.
    """
    allowed_types = blog_settings.ALLOWED_IMAGE_TYPES
    if descriptor.content_type.lower() not in allowed_types:
        return UploadValidation(
            valid=False,
            reason="Invalid file type. Please upload a JPEG, PNG, GIF, or WebP image.",
            code=TYPE,
        )

    max_size = blog_settings.MAX_UPLOAD_SIZE
    if descriptor.size > max_size:
        return UploadValidation(
            valid=False,
            reason=(
                f"File size exceeds {blog_settings.MAX_UPLOAD_SIZE_MB}MB limit. "
                f"Current size: {descriptor.human_size}"
            ),
            code=SIZE,
        )

    return UploadValidation(valid=True)


def ensure_valid_upload(descriptor):
    """Raise UploadRejected unless the descriptor passes the gate."""
    result = validate_upload(descriptor)
    if not result.valid:
        logger.info("Rejected upload %r: %s", descriptor.name, result.reason)
        raise UploadRejected(result.reason, result.code)
    return result


def _read(uploaded_file):
    if hasattr(uploaded_file, "chunks"):
        data = b"".join(uploaded_file.chunks())
    else:
        data = uploaded_file.read()
    if hasattr(uploaded_file, "seek"):
        uploaded_file.seek(0)
    return data


def upload_image(uploaded_file, storage=None):
    """
    Validate and store an inline image.

    Returns:
        Public URL of the stored file.

    Raises:
        UploadRejected: the file failed the gate; storage is not called
        CollaboratorFailure: the storage call failed
    """
    descriptor = UploadDescriptor.from_file(uploaded_file)
    ensure_valid_upload(descriptor)

    storage = storage or DjangoStorageBackend()
    data = _read(uploaded_file)
    path = content_addressed_path(data, descriptor.name, prefix=blog_settings.UPLOAD_PATH)
    return storage.upload(data, path)


def _resize_to_jpeg(image, max_width):
    """Return JPEG bytes of image scaled down to max_width."""
    if image.width > max_width:
        height = round(image.height * max_width / image.width)
        image = image.resize((max_width, height), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=blog_settings.HERO_IMAGE_QUALITY, optimize=True)
    return buffer.getvalue()


def process_hero_image(uploaded_file, storage=None):
    """
    Validate a hero image, build its large and thumbnail variants, store both.

    Variants are JPEGs no wider than HERO_IMAGE_LARGE_WIDTH and
    HERO_IMAGE_THUMBNAIL_WIDTH.

    Returns:
        HeroImage with both public URLs.
    """
    descriptor = UploadDescriptor.from_file(uploaded_file)
    ensure_valid_upload(descriptor)

    data = _read(uploaded_file)
    try:
        with Image.open(io.BytesIO(data)) as img:
            image = ImageOps.exif_transpose(img).convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        logger.info("Rejected upload %r: not a readable image", descriptor.name)
        raise UploadRejected("File is not a readable image.", UNREADABLE) from exc

    large = _resize_to_jpeg(image, blog_settings.HERO_IMAGE_LARGE_WIDTH)
    thumbnail = _resize_to_jpeg(image, blog_settings.HERO_IMAGE_THUMBNAIL_WIDTH)

    storage = storage or DjangoStorageBackend()
    prefix = blog_settings.HERO_IMAGE_PATH
    return HeroImage(
        large=storage.upload(large, content_addressed_path(data, "hero.jpg", prefix, "-large")),
        thumbnail=storage.upload(
            thumbnail, content_addressed_path(data, "hero.jpg", prefix, "-thumbnail")
        ),
    )
