"""
Video API Endpoints
"""
import json
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from vidvault.database import get_db
from vidvault.models import Video
from vidvault.schemas.video import (
    ErrorResponse,
    SavedVideo,
    VideoMetadataCreate,
    VideoResponse,
    VideoSavedResponse,
    missing_required_fields,
)
from vidvault.security import Identity, require_identity

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["videos"])


def _error(status_code: int, error: str, details: str = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/video-upload",
    response_model=VideoSavedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def save_video_metadata(
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    """
    Save metadata for a video already stored on the media host

    - Body is JSON: title, description, publicId, videoUrl, originalSize,
      compressedSize, duration and optional format/width/height
    - title, publicId and videoUrl must be non-blank
    - duration falls back to 0 when absent or non-numeric
    - A publicId that already exists returns 409
    """
    logger.info(f"Video metadata save requested by {identity.user_id}")

    try:
        payload = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"JSON parsing failed: {e}")
        return _error(status.HTTP_400_BAD_REQUEST, "Failed to parse JSON data", str(e))

    if not isinstance(payload, dict):
        return _error(status.HTTP_400_BAD_REQUEST, "Failed to parse JSON data", "Expected a JSON object")

    missing = missing_required_fields(payload)
    if missing:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            f"Missing required fields: {', '.join(missing)}",
        )

    metadata = VideoMetadataCreate.model_validate(payload)
    logger.info(
        f"Saving video metadata: public_id={metadata.public_id}, title={metadata.title}, "
        f"original_size={metadata.original_size}, compressed_size={metadata.compressed_size}, "
        f"duration={metadata.duration}, format={metadata.format}, "
        f"dimensions={metadata.width}x{metadata.height}"
    )

    video = Video(
        title=metadata.title,
        description=metadata.description,
        public_id=metadata.public_id,
        original_size=metadata.original_size,
        compressed_size=metadata.compressed_size,
        duration=metadata.duration,
    )

    try:
        db.add(video)
        db.commit()
        db.refresh(video)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Duplicate public_id rejected: {metadata.public_id}")
        return _error(
            status.HTTP_409_CONFLICT,
            "A video with this publicId already exists",
            str(e.orig),
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database save failed: {type(e).__name__}: {e}")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to save video metadata",
            str(e),
        )

    logger.info(f"Video saved successfully: {video.id}")

    response = VideoSavedResponse(
        video=SavedVideo(
            id=video.id,
            title=video.title,
            public_id=video.public_id,
            video_url=metadata.video_url,
            created_at=video.created_at,
        )
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=response.model_dump(mode="json", by_alias=True),
    )


@router.get("/videos", response_model=list[VideoResponse], responses={500: {"model": ErrorResponse}})
def list_videos(db: Session = Depends(get_db)):
    """
    Get all videos, newest first
    """
    try:
        videos = db.query(Video).order_by(Video.created_at.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to list videos: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")

    return [VideoResponse.model_validate(video) for video in videos]


@router.get("/videos/{video_id}", response_model=VideoResponse)
def get_video(
    video_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    """
    Get video by ID

    - Returns 404 if video not found
    """
    video = db.query(Video).filter(Video.id == video_id).first()

    if not video:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Video {video_id} not found"
        )

    return VideoResponse.model_validate(video)
