"""
Local blob storage for outfit photos.

Files are written under ``root_dir/<owner>/`` and exposed through the
StaticFiles mount at ``public_prefix``.
"""

import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Optional, Union

DEFAULT_EXTENSION = ".jpg"


class LocalBlobStore:
    """Stores raw image bytes and hands back stable public URLs."""

    def __init__(self, root_dir: Union[str, Path], public_prefix: str = "/api/images"):
        self.logger = logging.getLogger(__name__)
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)
        self.public_prefix = public_prefix.rstrip("/")

        self.logger.info("Blob store initialized at %s", self.root_dir)

    def _extension_for(self, filename: Optional[str], content_type: Optional[str]) -> str:
        ext = Path(filename or "").suffix.lower()
        if ext:
            return ext
        if content_type:
            guessed = mimetypes.guess_extension(content_type.split(";")[0].strip())
            if guessed:
                return ".jpg" if guessed == ".jpe" else guessed
        return DEFAULT_EXTENSION

    def save(self, data: bytes, filename: Optional[str] = None,
             content_type: Optional[str] = None, owner: str = "anonymous") -> str:
        """
        Persist image bytes.

        Args:
            data: raw file content
            filename: original name, used only for its extension
            content_type: MIME type, used when the filename has no extension
            owner: sub-directory (normally the user id)

        Returns:
            Public URL of the stored file
        """
        ext = self._extension_for(filename, content_type)
        unique_filename = f"{owner}_{uuid.uuid4().hex}{ext}"

        owner_dir = self.root_dir / owner
        owner_dir.mkdir(parents=True, exist_ok=True)
        (owner_dir / unique_filename).write_bytes(data)

        return f"{self.public_prefix}/{owner}/{unique_filename}"

    def path_for(self, url: str) -> Optional[Path]:
        """Map a public URL back to its file, or None if it is not ours."""
        prefix = self.public_prefix + "/"
        if not url or not url.startswith(prefix):
            return None

        root = self.root_dir.resolve()
        candidate = (root / url[len(prefix):]).resolve()
        if root not in candidate.parents:
            return None
        return candidate

    def delete(self, url: str) -> bool:
        path = self.path_for(url)
        if path is None or not path.is_file():
            return False
        path.unlink()
        self.logger.info("Deleted blob %s", url)
        return True
