import base64
import binascii
import logging
import sys
import time
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

MIME_EXTENSION_MAP = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/png": "png",
}
DEFAULT_MIME_TYPE = "image/png"
FALLBACK_EXTENSION = "bin"


class ImageSaveError(Exception):
    """Base class for image persistence failures."""


class EmptyPayloadError(ImageSaveError):
    """Raised when the base64 payload is empty or whitespace."""

    def __init__(self):
        super().__init__("image payload is empty")


class Base64DecodeError(ImageSaveError):
    """Raised when the payload is not valid standard base64."""


class DirectoryResolutionError(ImageSaveError):
    """Raised when no output directory is given and the application directory is unknown."""


class ImageIoError(ImageSaveError):
    """Raised when the output directory or image file cannot be written."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"failed to write image to {path}: {cause}")
        self.path = path
        self.cause = cause


class SaveImageOptions(BaseModel):
    file_stem: str | None = None
    mime_type: str | None = None
    output_dir: Path | None = None


def extension_from_mime(mime_type: str | None) -> str:
    key = (mime_type or DEFAULT_MIME_TYPE).lower()
    return MIME_EXTENSION_MAP.get(key, FALLBACK_EXTENSION)


def application_dir() -> Path:
    """Directory containing the running interpreter executable."""
    if not sys.executable:
        raise DirectoryResolutionError("failed to resolve application directory")
    try:
        executable = Path(sys.executable).resolve()
    except OSError as e:
        raise DirectoryResolutionError(
            f"failed to resolve application directory: {e}"
        ) from e
    if executable.parent == executable:
        raise DirectoryResolutionError("application directory has no parent directory")
    return executable.parent


def _timestamp_millis() -> int:
    return time.time_ns() // 1_000_000


def save_base64_image(
    encoded: str, options: SaveImageOptions | None = None
) -> Path:
    """Decode a base64 image and write it to disk.

    Args:
        encoded: Standard-alphabet base64 image bytes.
        options: File stem, MIME type and output directory. Without a stem the
            name is ``mawaku-image-<epoch millis>``; without a directory the
            application directory is used.

    Returns:
        Absolute path of the written file. Existing files are overwritten.
    """
    options = options or SaveImageOptions()
    if not encoded.strip():
        raise EmptyPayloadError()

    output_dir = options.output_dir if options.output_dir is not None else application_dir()
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ImageIoError(output_dir, e) from e

    extension = extension_from_mime(options.mime_type)
    if options.file_stem is not None:
        file_name = f"{options.file_stem}.{extension}"
    else:
        file_name = f"mawaku-image-{_timestamp_millis()}.{extension}"
    path = (output_dir / file_name).absolute()

    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeError(f"failed to decode image bytes: {e}") from e

    try:
        path.write_bytes(data)
    except OSError as e:
        raise ImageIoError(path, e) from e

    logger.info(f"Saved image: {path}")
    return path
