"""Image descriptions for API responses."""

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ImageInfo(BaseModel):
    """Basic facts about a parsed image."""
    file_name: str
    size: int
    content_type: str = "image/png"
    url: Optional[str] = None
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    has_character_data: bool = False


def describe_image(
    image_data: bytes,
    file_name: str,
    content_type: Optional[str] = None,
    url: Optional[str] = None,
    has_character_data: bool = False,
) -> ImageInfo:
    """
    Describe an image without decoding its pixels.

    Pillow only reads the header here, so truncated images with intact
    headers still report their dimensions. Unreadable data leaves format and
    dimensions unset.
    """
    info = ImageInfo(
        file_name=file_name,
        size=len(image_data),
        content_type=content_type or "image/png",
        url=url,
        has_character_data=has_character_data,
    )

    try:
        with Image.open(BytesIO(image_data)) as image:
            info.format = image.format
            info.width, info.height = image.size
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug(f"Could not read image header for '{file_name}': {e}")

    return info
