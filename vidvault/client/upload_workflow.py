"""
Upload Workflow (client side)

Two-phase save of a video (or an image, when given image_target()):

    1. the file goes straight from the client to the media host
    2. the host's reference metadata is posted to /api/video-upload

State machine:

    idle -> uploading_to_host -> saving_metadata -> complete
                  |                    |
                  +------> error <-----+      error -> idle after a delay

If phase 1 succeeds and phase 2 fails the hosted asset stays orphaned;
nothing is deleted from the media host.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

import httpx

from vidvault.config import get_settings
from vidvault.schemas.video import missing_required_fields
from vidvault.services.media_host import (
    MediaHostClient,
    MediaHostUploadResult,
    UploadTarget,
    video_target,
)
from vidvault.utils.upload_utils import (
    MAX_IMAGE_SIZE,
    FileValidationError,
    MediaFile,
    UploadError,
    format_file_size,
    validate_image_file,
    validate_video_file,
)

logger = logging.getLogger(__name__)


class UploadState(str, Enum):
    IDLE = "idle"
    UPLOADING_TO_HOST = "uploading_to_host"
    SAVING_METADATA = "saving_metadata"
    COMPLETE = "complete"
    ERROR = "error"


STATE_MESSAGES = {
    UploadState.IDLE: "",
    UploadState.UPLOADING_TO_HOST: "Uploading to media host...",
    UploadState.SAVING_METADATA: "Saving to database...",
    UploadState.COMPLETE: "Upload complete!",
    UploadState.ERROR: "Upload failed. Please try again.",
}


class MetadataSaveError(UploadError):
    """Metadata endpoint rejected the save"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def validate_video_metadata(metadata: Dict[str, Any]) -> None:
    """
    Raises:
        MetadataSaveError: If title, publicId or videoUrl is missing
    """
    missing = missing_required_fields(metadata)
    if missing:
        raise MetadataSaveError(f"Missing required fields: {', '.join(missing)}")


class VideoApiClient:
    """Talks to the metadata endpoint of the VidVault API"""

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.headers = {"Content-Type": "application/json"}
        if access_token:
            self.headers["Authorization"] = f"Bearer {access_token}"

    @classmethod
    def from_settings(
        cls,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "VideoApiClient":
        return cls(get_settings().api_base_url, access_token=access_token, transport=transport)

    async def save_video_metadata(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST metadata to /api/video-upload

        Returns:
            The saved "video" object: id, title, publicId, videoUrl, createdAt

        Raises:
            MetadataSaveError: Non-success response or transport failure
        """
        validate_video_metadata(metadata)
        logger.info("Saving video metadata to database...")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post("/api/video-upload", json=metadata, headers=self.headers)
        except httpx.HTTPError as e:
            raise MetadataSaveError(f"Database save failed: {e}") from e

        if response.is_error:
            error = _body_field(response, "error")
            if not isinstance(error, str) or not error:
                error = "Unknown error"
            logger.error(f"Database save failed ({response.status_code}): {error}")
            raise MetadataSaveError(f"Database save failed: {error}", status_code=response.status_code)

        video = _body_field(response, "video")
        if not isinstance(video, dict) or "id" not in video:
            logger.error(f"Unexpected metadata response ({response.status_code})")
            raise MetadataSaveError(
                "Database save failed: unexpected response from server",
                status_code=response.status_code,
            )
        logger.info(f"Video metadata saved successfully: {video['id']}")
        return video


def _body_field(response: httpx.Response, key: str) -> Any:
    """Read one key from a JSON object body; None for any other body"""
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get(key) if isinstance(body, dict) else None


@dataclass
class UploadOutcome:
    """What the caller sees once submit() returns"""
    success: bool
    message: str
    video: Optional[Dict[str, Any]] = None
    host_result: Optional[MediaHostUploadResult] = None
    original_size: int = 0
    compressed_size: int = 0
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def compression_ratio(self) -> Optional[float]:
        """Percentage saved by host-side processing, None before phase 1 finishes"""
        if not self.original_size or self.host_result is None:
            return None
        return round((1 - self.compressed_size / self.original_size) * 100, 1)


class UploadWorkflow:
    """
    Drives one upload at a time through both phases

    Usage:
        workflow = UploadWorkflow(MediaHostClient.from_settings(), VideoApiClient.from_settings(token))
        outcome = await workflow.submit(MediaFile.from_path("talk.mp4"), title="Talk")
    """

    def __init__(
        self,
        media_host: MediaHostClient,
        api: VideoApiClient,
        target: Optional[UploadTarget] = None,
        max_size: Optional[int] = None,
        error_reset_seconds: Optional[float] = None,
        on_change: Optional[Callable[[UploadState, str], None]] = None,
    ):
        self.media_host = media_host
        self.api = api
        self.target = target or video_target()
        settings = get_settings()
        if max_size is None:
            max_size = MAX_IMAGE_SIZE if self.is_image else settings.max_video_size
        self.max_size = max_size
        self.error_reset_seconds = (
            settings.error_reset_seconds if error_reset_seconds is None else error_reset_seconds
        )
        self.on_change = on_change

        self.state = UploadState.IDLE
        self.message = STATE_MESSAGES[UploadState.IDLE]
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    @property
    def is_image(self) -> bool:
        return self.target.resource_type == "image"

    @property
    def busy(self) -> bool:
        """True while a submit is in flight; the submit control stays disabled"""
        return self.state in (UploadState.UPLOADING_TO_HOST, UploadState.SAVING_METADATA)

    def _set_state(self, state: UploadState, message: Optional[str] = None) -> None:
        self.state = state
        self.message = message if message is not None else STATE_MESSAGES[state]
        logger.debug(f"Upload state -> {state.value}: {self.message}")
        if self.on_change:
            self.on_change(state, self.message)

    def reset(self) -> None:
        """Return to idle so the form can be retried"""
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        self._set_state(UploadState.IDLE)

    def _fail(self, error: UploadError) -> None:
        self._set_state(UploadState.ERROR, str(error))
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(self.error_reset_seconds, self.reset)

    async def submit(
        self,
        file: Optional[MediaFile],
        title: str,
        description: str = "",
    ) -> UploadOutcome:
        """
        Run both phases for one file

        Never raises for upload failures: the outcome carries the message
        and the workflow moves to error, then back to idle.
        """
        if self.busy:
            return UploadOutcome(success=False, message="An upload is already in progress")

        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

        outcome = UploadOutcome(success=False, message="")
        try:
            if not title or not title.strip():
                raise FileValidationError("Please enter a title")
            validate_file = validate_image_file if self.is_image else validate_video_file
            validate_file(file, max_size=self.max_size)
            outcome.original_size = file.size

            self._set_state(UploadState.UPLOADING_TO_HOST)
            host_result = await self.media_host.upload(file, self.target)
            outcome.host_result = host_result
            outcome.compressed_size = host_result.bytes

            self._set_state(UploadState.SAVING_METADATA)
            metadata = {
                "title": title.strip(),
                "description": description.strip(),
                "publicId": host_result.public_id,
                "videoUrl": host_result.secure_url,
                "originalSize": str(file.size),
                "compressedSize": str(host_result.bytes),
                "duration": host_result.duration or 0,
                "format": host_result.format,
                "width": host_result.width,
                "height": host_result.height,
            }
            outcome.video = await self.api.save_video_metadata(metadata)
        except UploadError as e:
            logger.error(f"Upload failed: {e}")
            self._fail(e)
            outcome.message = str(e)
            return outcome

        self._set_state(UploadState.COMPLETE)
        outcome.success = True
        outcome.message = STATE_MESSAGES[UploadState.COMPLETE]
        outcome.details = {
            "original_size": format_file_size(outcome.original_size),
            "compressed_size": format_file_size(outcome.compressed_size),
            "compression_ratio": outcome.compression_ratio,
        }
        return outcome
