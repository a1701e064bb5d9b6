"""
Social Media Formats

Resizing is done by the media host: each preset becomes a transformation
segment in the delivery URL, so no image processing happens locally.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from vidvault.config import Settings, get_settings


@dataclass(frozen=True)
class SocialFormat:
    key: str
    label: str
    width: int
    height: int

    @property
    def aspect_ratio(self) -> str:
        return f"{self.width}:{self.height}"


SOCIAL_FORMATS: Dict[str, SocialFormat] = {
    f.key: f
    for f in (
        SocialFormat("instagram-square", "Instagram Square (1:1)", 1080, 1080),
        SocialFormat("instagram-portrait", "Instagram Portrait (4:5)", 1080, 1350),
        SocialFormat("twitter-post", "Twitter Post (16:9)", 1200, 675),
        SocialFormat("twitter-header", "Twitter Header (3:1)", 1500, 500),
        SocialFormat("facebook-cover", "Facebook Cover (205:78)", 820, 312),
    )
}


class UnknownFormatError(ValueError):
    """Requested social format does not exist"""
    pass


def get_social_format(key: str) -> SocialFormat:
    try:
        return SOCIAL_FORMATS[key]
    except KeyError:
        raise UnknownFormatError(
            f"Unknown social format '{key}'. Available: {', '.join(SOCIAL_FORMATS)}"
        )


def transformation_for(social_format: SocialFormat) -> str:
    """
    Examples:
        >>> transformation_for(SOCIAL_FORMATS["twitter-post"])
        'c_fill,g_auto,w_1200,h_675'
    """
    return f"c_fill,g_auto,w_{social_format.width},h_{social_format.height}"


def build_resized_url(
    public_id: str,
    format_key: str,
    resource_type: str = "image",
    settings: Optional[Settings] = None,
) -> str:
    """
    Build a media host delivery URL that crops an asset to a social format

    Args:
        public_id: Media host reference id
        format_key: Key from SOCIAL_FORMATS
        resource_type: "image" or "video"

    Returns:
        Delivery URL, e.g.
        https://res.cloudinary.com/demo/image/upload/c_fill,g_auto,w_1080,h_1080/images/cat

    Raises:
        UnknownFormatError: If format_key is not a known preset
        ValueError: If public_id is blank
    """
    settings = settings or get_settings()
    social_format = get_social_format(format_key)

    public_id = public_id.strip().lstrip("/")
    if not public_id:
        raise ValueError("public_id is required")

    base = settings.media_host_delivery_url.rstrip("/")
    return (
        f"{base}/{settings.media_host_cloud_name}/{resource_type}/upload/"
        f"{transformation_for(social_format)}/{public_id}"
    )
