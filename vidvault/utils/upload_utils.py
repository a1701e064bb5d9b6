"""
Upload Utilities

File checks that run before anything is sent over the network, plus
display formatting for sizes and durations.
"""
import logging
import math
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

MAX_VIDEO_SIZE = 70 * 1024 * 1024  # 70MB in bytes
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB in bytes

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


class UploadError(Exception):
    """Base class for upload workflow failures"""
    pass


class FileValidationError(UploadError):
    """File rejected before upload"""
    pass


@dataclass
class MediaFile:
    """A file selected for upload"""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str, content_type: Optional[str] = None) -> "MediaFile":
        """
        Load a local file, guessing its media type from the extension

        Examples:
            >>> MediaFile.from_path("clip.mp4").content_type
            'video/mp4'
        """
        file_path = Path(path)
        guessed, _ = mimetypes.guess_type(file_path.name)
        return cls(
            filename=file_path.name,
            content_type=content_type or guessed or "application/octet-stream",
            content=file_path.read_bytes(),
        )


def validate_media_file(
    file: Optional[MediaFile],
    type_prefix: str,
    max_size: int,
    kind: str = "file",
) -> None:
    """
    Validate a file before upload

    Args:
        file: Selected file, or None when nothing was chosen
        type_prefix: Required media type prefix, e.g. "video/"
        max_size: Size ceiling in bytes
        kind: Word used in error messages ("video", "image")

    Raises:
        FileValidationError: If the file is missing, too large or of the wrong type
    """
    if file is None:
        raise FileValidationError(f"Please select a {kind} file")

    if file.size > max_size:
        raise FileValidationError(f"File size should be less than {max_size // (1024 * 1024)}MB")

    if not (file.content_type or "").startswith(type_prefix):
        raise FileValidationError(f"Please select a valid {kind} file")

    logger.info(f"File validated: {file.filename} ({file.size / 1024 / 1024:.2f}MB)")


def validate_video_file(file: Optional[MediaFile], max_size: int = MAX_VIDEO_SIZE) -> None:
    validate_media_file(file, "video/", max_size, kind="video")


def validate_image_file(file: Optional[MediaFile], max_size: int = MAX_IMAGE_SIZE) -> None:
    validate_media_file(file, "image/", max_size, kind="image")


def format_file_size(num_bytes: float) -> str:
    """
    Format a byte count for display

    Examples:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if num_bytes <= 0:
        return "0 Bytes"

    k = 1024
    i = min(int(math.floor(math.log(num_bytes) / math.log(k))), len(SIZE_UNITS) - 1)
    value = round(num_bytes / math.pow(k, i), 2)
    # Match "1.5 KB" rather than "1.50 KB" and "2 MB" rather than "2.0 MB"
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[i]}"


def format_duration(seconds: Optional[float]) -> str:
    """
    Format seconds as M:SS

    Examples:
        >>> format_duration(75)
        '1:15'
        >>> format_duration(None)
        '0:00'
    """
    if not seconds or seconds <= 0:
        return "0:00"

    minutes = int(seconds // 60)
    remaining = int(seconds % 60)
    return f"{minutes}:{remaining:02d}"
