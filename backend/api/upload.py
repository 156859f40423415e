import logging
from pathlib import Path
from typing import Optional, Set, Tuple

from fastapi import UploadFile, HTTPException

import config
from services.image_service import ImageService


class UploadHandler:
    """
    Validates uploaded and captured outfit photos and returns their raw bytes
    """

    def __init__(self, image_service: Optional[ImageService] = None,
                 max_file_size: Optional[int] = None,
                 allowed_extensions: Optional[Set[str]] = None):
        self.logger = logging.getLogger(__name__)
        self.image_service = image_service or ImageService()

        # Supported formats
        self.allowed_extensions = allowed_extensions or config.ALLOWED_EXTENSIONS

        # Max file size
        self.max_file_size = max_file_size or config.MAX_FILE_SIZE

    def _reject(self, detail: str):
        self.logger.warning("Upload rejected: %s", detail)
        raise HTTPException(status_code=400, detail=detail)

    def _validate_image(self, file: UploadFile) -> None:
        """
        Check the extension and the declared size
        """
        file_ext = Path(file.filename or "").suffix.lower()
        if file_ext not in self.allowed_extensions:
            self._reject(
                f"Unsupported file format. Supported formats: {', '.join(sorted(self.allowed_extensions))}"
            )

        if file.size and file.size > self.max_file_size:
            self._reject(f"File exceeds the size limit ({self.max_file_size // (1024 * 1024)}MB)")

    def _check_size(self, data: bytes) -> None:
        if not data:
            self._reject("Uploaded file is empty")
        if len(data) > self.max_file_size:
            self._reject(f"File exceeds the size limit ({self.max_file_size // (1024 * 1024)}MB)")

    async def read_upload(self, file: UploadFile) -> Tuple[bytes, str]:
        """
        Validate a multipart upload and read it.

        Returns:
            (file bytes, content type)
        """
        self._validate_image(file)
        data = await file.read()
        self._check_size(data)
        return data, file.content_type or "application/octet-stream"

    def read_capture(self, data_url: str) -> Tuple[bytes, str]:
        """
        Validate a camera capture sent as a data URL.

        Returns:
            (image bytes, content type)
        """
        try:
            data, content_type = self.image_service.decode_data_url(data_url)
        except ValueError as e:
            self._reject(str(e))
        self._check_size(data)
        return data, content_type
