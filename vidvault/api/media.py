"""
Social Share API Endpoints

Resize an uploaded asset for social media through media host transformations
"""
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List

from vidvault.security import Identity, require_identity
from vidvault.services.social_formats import (
    SOCIAL_FORMATS,
    build_resized_url,
)

router = APIRouter(prefix="/api", tags=["social"])


class SocialFormatResponse(BaseModel):
    key: str
    label: str
    width: int
    height: int
    aspect_ratio: str


class SocialShareRequest(BaseModel):
    """Resize request"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    public_id: str = Field(..., min_length=1, description="Media host reference id")
    format: str = Field(..., description="Social format key")
    resource_type: str = Field(default="image", pattern="^(image|video)$")


class SocialShareResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    public_id: str
    format: str
    width: int
    height: int
    url: str


@router.get("/social-formats", response_model=List[SocialFormatResponse])
def list_social_formats(identity: Identity = Depends(require_identity)):
    """List the available social media presets"""
    return [
        SocialFormatResponse(
            key=f.key, label=f.label, width=f.width, height=f.height, aspect_ratio=f.aspect_ratio
        )
        for f in SOCIAL_FORMATS.values()
    ]


@router.post("/social-share", response_model=SocialShareResponse)
def create_social_share(
    request: SocialShareRequest,
    identity: Identity = Depends(require_identity),
):
    """
    Build a resized delivery URL for an uploaded asset

    - Returns 400 for an unknown format or blank publicId
    """
    try:
        url = build_resized_url(request.public_id, request.format, request.resource_type)
    except ValueError as e:
        # UnknownFormatError included
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    social_format = SOCIAL_FORMATS[request.format]
    return SocialShareResponse(
        public_id=request.public_id.strip(),
        format=social_format.key,
        width=social_format.width,
        height=social_format.height,
        url=url,
    )
