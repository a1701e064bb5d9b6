"""
Pydantic Schemas
"""
from vidvault.schemas.video import (
    VideoMetadataCreate, SavedVideo, VideoSavedResponse, VideoResponse, ErrorResponse
)

__all__ = [
    "VideoMetadataCreate", "SavedVideo", "VideoSavedResponse", "VideoResponse", "ErrorResponse"
]
