"""
Image decoding: uploaded bytes, camera data-URLs and files on disk into RGBA
pixel buffers for the color pipeline.
"""

import base64
import binascii
import io
import logging
import re
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from models.color_analysis import PixelBuffer

_DATA_URL_PATTERN = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<payload>.*)$',
                               re.DOTALL)


class ImageService:
    """Turns image sources into PixelBuffer objects."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def _to_pixel_buffer(self, image: Image.Image) -> PixelBuffer:
        # phones store rotation in EXIF; browsers apply it before drawing
        image = ImageOps.exif_transpose(image)
        rgba = np.array(image.convert('RGBA'), dtype=np.uint8)
        # canvas getImageData reports fully transparent pixels as (0, 0, 0, 0)
        rgba[rgba[..., 3] == 0] = 0
        height, width = rgba.shape[:2]
        return PixelBuffer(width=width, height=height, data=rgba.reshape(-1))

    def decode_bytes(self, data: bytes) -> PixelBuffer:
        """
        Decode encoded image bytes (JPEG, PNG, ...).

        Raises:
            ValueError: if the bytes are not a readable image
        """
        if not data:
            raise ValueError("Image data is empty")
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                return self._to_pixel_buffer(image)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise ValueError(f"Data is not a readable image: {exc}") from exc

    def load_path(self, file_path: Union[str, Path]) -> PixelBuffer:
        """
        Load an image file from disk.

        Raises:
            FileNotFoundError: if the path does not point to a file
            ValueError: if the file is not an image
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return self.decode_bytes(path.read_bytes())

    def decode_data_url(self, data_url: str) -> Tuple[bytes, str]:
        """
        Split a ``data:image/...;base64,`` URL into raw bytes and content type.

        Raises:
            ValueError: if the URL is malformed or not an image
        """
        match = _DATA_URL_PATTERN.match(data_url.strip()) if data_url else None
        if not match:
            raise ValueError("Expected a base64 data URL")

        content_type = match.group('mime') or 'application/octet-stream'
        if not content_type.startswith('image/'):
            raise ValueError(f"Unsupported content type: {content_type}")

        try:
            payload = base64.b64decode(match.group('payload'), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Data URL payload is not valid base64") from exc
        return payload, content_type
