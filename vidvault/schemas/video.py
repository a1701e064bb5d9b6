"""
Video Schemas
"""
import math
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import AliasGenerator, BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

REQUIRED_METADATA_FIELDS = ("title", "publicId", "videoUrl")


def missing_required_fields(payload: dict) -> list[str]:
    """Return the required metadata fields that are absent or blank"""
    missing = []
    for field in REQUIRED_METADATA_FIELDS:
        value = payload.get(field)
        if value is None or not str(value).strip():
            missing.append(field)
    return missing


def coerce_duration(value: Any) -> float:
    """
    Coerce an upstream duration to non-negative seconds

    Absent, non-numeric, non-finite or negative values become 0.

    Examples:
        >>> coerce_duration("12.5")
        12.5
        >>> coerce_duration("abc")
        0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        seconds = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(seconds) or seconds < 0:
        return 0.0
    return seconds


def coerce_byte_count(value: Any) -> str:
    """Byte counts are stored as text; absent or unparseable values become "0" """
    if value is None or isinstance(value, bool):
        return "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value).strip()
    return text or "0"


class VideoMetadataCreate(BaseModel):
    """Metadata save request, sent after the asset is on the media host"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    description: str = ""
    public_id: str
    video_url: str
    original_size: str = "0"
    compressed_size: str = "0"
    duration: float = 0.0
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @field_validator("title", "public_id", "video_url", mode="before")
    @classmethod
    def strip_text(cls, value):
        return str(value).strip()

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value):
        return "" if value is None else str(value)

    @field_validator("original_size", "compressed_size", mode="before")
    @classmethod
    def normalize_byte_count(cls, value):
        return coerce_byte_count(value)

    @field_validator("duration", mode="before")
    @classmethod
    def normalize_duration(cls, value):
        return coerce_duration(value)

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, value):
        return None if value is None else str(value)

    @field_validator("width", "height", mode="before")
    @classmethod
    def optional_dimension(cls, value):
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError, OverflowError):
            # inf and nan arrive as floats from json.loads
            return None


class SavedVideo(BaseModel):
    """Consolidated record returned by the metadata endpoint"""
    model_config = ConfigDict(alias_generator=AliasGenerator(serialization_alias=to_camel))

    id: UUID
    title: str
    public_id: str
    video_url: str
    created_at: datetime


class VideoSavedResponse(BaseModel):
    success: bool = True
    video: SavedVideo


class VideoResponse(BaseModel):
    """Video response schema"""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: UUID
    title: str
    description: str
    public_id: str
    original_size: str
    compressed_size: str
    duration: float
    created_at: datetime


class ErrorResponse(BaseModel):
    """Error body shared by the API routes"""
    error: str
    details: Optional[str] = None
