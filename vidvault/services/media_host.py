"""
Hosted Media Service Client

Uploads assets straight to the media host (Cloudinary) with an unsigned
upload preset. The host answers with the public_id and secure_url that the
metadata endpoint later persists.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from vidvault.config import Settings, get_settings
from vidvault.utils.upload_utils import MediaFile, UploadError

logger = logging.getLogger(__name__)


class MediaHostError(UploadError):
    """Media host rejected the upload or could not be reached"""
    pass


@dataclass(frozen=True)
class UploadTarget:
    """Where and how one category of asset is uploaded"""
    resource_type: str  # "video" | "image"
    upload_preset: str
    folder: str


@dataclass
class MediaHostUploadResult:
    """Fields the media host returns for a stored asset"""
    public_id: str
    secure_url: str
    bytes: int
    duration: Optional[float] = None
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "MediaHostUploadResult":
        if not isinstance(data, dict):
            raise MediaHostError("Media host returned an unexpected response")
        try:
            return cls(
                public_id=data["public_id"],
                secure_url=data["secure_url"],
                bytes=int(data.get("bytes") or 0),
                duration=data.get("duration"),
                format=data.get("format"),
                width=data.get("width"),
                height=data.get("height"),
                raw=data,
            )
        except KeyError as e:
            raise MediaHostError(f"Media host response missing field: {e.args[0]}")
        except (TypeError, ValueError) as e:
            raise MediaHostError(f"Media host returned an unexpected response: {e}")


def video_target(settings: Optional[Settings] = None) -> UploadTarget:
    settings = settings or get_settings()
    return UploadTarget("video", settings.video_upload_preset, settings.video_folder)


def image_target(settings: Optional[Settings] = None) -> UploadTarget:
    settings = settings or get_settings()
    return UploadTarget("image", settings.image_upload_preset, settings.image_folder)


class MediaHostClient:
    """
    Wrapper for the media host upload API

    Usage:
        client = MediaHostClient.from_settings()
        result = await client.upload(media_file, video_target())
    """

    def __init__(
        self,
        cloud_name: str,
        base_url: str = "https://api.cloudinary.com/v1_1",
        timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not cloud_name:
            raise MediaHostError("Media host cloud name is required")

        self.cloud_name = cloud_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "MediaHostClient":
        settings = settings or get_settings()
        return cls(
            cloud_name=settings.media_host_cloud_name,
            base_url=settings.media_host_base_url,
            timeout=settings.media_host_timeout,
            transport=transport,
        )

    def upload_url(self, resource_type: str) -> str:
        return f"{self.base_url}/{self.cloud_name}/{resource_type}/upload"

    async def upload(self, file: MediaFile, target: UploadTarget) -> MediaHostUploadResult:
        """
        Upload one file to the media host

        Args:
            file: File to send
            target: Resource type, unsigned preset and folder

        Returns:
            MediaHostUploadResult with public_id, secure_url and bytes

        Raises:
            MediaHostError: Non-success response or transport failure
        """
        if not target.upload_preset:
            raise MediaHostError("Media host upload preset is required")

        data = {
            "upload_preset": target.upload_preset,
            "resource_type": target.resource_type,
            "folder": target.folder,
        }
        files = {"file": (file.filename, file.content, file.content_type)}

        logger.info(
            f"Uploading {file.filename} ({file.size / 1024 / 1024:.2f}MB) "
            f"to media host folder '{target.folder}'"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.upload_url(target.resource_type),
                    data=data,
                    files=files,
                )
        except httpx.HTTPError as e:
            logger.error(f"Media host upload failed: {e}")
            raise MediaHostError(f"Media host upload failed: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.error(f"Media host upload failed ({response.status_code}): {message}")
            raise MediaHostError(f"Media host upload failed: {message}")

        try:
            body = response.json()
        except ValueError:
            logger.error(f"Media host returned non-JSON response ({response.status_code})")
            raise MediaHostError("Media host returned an unexpected response")

        result = MediaHostUploadResult.from_response(body)
        logger.info(f"Media host upload successful: {result.public_id}")
        return result


def _error_message(response: httpx.Response) -> str:
    """Pull {"error": {"message": ...}} out of a failed upload response"""
    try:
        body = response.json()
    except ValueError:
        return response.text or "Unknown error"

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or "Unknown error"
    if isinstance(error, str):
        return error
    return "Unknown error"
