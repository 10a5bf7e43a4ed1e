"""Document storage client.

The ledger only keeps the opaque path returned by ``store``; everything
about where and how bytes are kept lives behind this interface.
"""
import os
import secrets
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from config import get_settings
from exceptions import DocumentStorageError
from logging_config import get_logger

logger = get_logger(__name__)
settings = get_settings()


class UploadedFile(BaseModel):
    """File handed to the ledger for attachment."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


class DocumentStore(ABC):
    """Interface of the external document-storage collaborator."""

    @abstractmethod
    def store(self, data: bytes, suggested_name: str) -> str:
        """
        Persist bytes and return an opaque path.

        Raises:
            DocumentStorageError: If the bytes could not be stored
        """

    @abstractmethod
    def delete(self, path: str) -> None:
        """
        Remove a previously stored file.

        Raises:
            DocumentStorageError: If the file could not be removed
        """

    def is_available(self) -> bool:
        return True


class LocalDocumentStore(DocumentStore):
    """Stores documents under a directory on the local filesystem."""

    PUBLIC_PREFIX = "/uploads/documents"

    def __init__(self, root: Optional[str] = None, max_bytes: Optional[int] = None):
        """
        Initialize local store.

        Args:
            root: Upload root directory (default: settings.upload_dir)
            max_bytes: Maximum accepted file size (default: settings.max_upload_bytes)
        """
        self.root = Path(root or settings.upload_dir)
        self.documents_dir = self.root / "documents"
        self.max_bytes = max_bytes or settings.max_upload_bytes

    def _unique_filename(self, suggested_name: str) -> str:
        extension = suggested_name.rsplit(".", 1)[-1] if "." in suggested_name else "bin"
        extension = "".join(ch for ch in extension if ch.isalnum())[:10] or "bin"
        return f"{int(time.time() * 1000)}_{secrets.token_hex(6)}.{extension}"

    def store(self, data: bytes, suggested_name: str) -> str:
        if not data:
            raise DocumentStorageError(f"File {suggested_name!r} is empty")

        if len(data) > self.max_bytes:
            raise DocumentStorageError(
                f"File {suggested_name!r} exceeds {self.max_bytes} bytes",
                {"size": len(data)},
            )

        filename = self._unique_filename(suggested_name)
        try:
            self.documents_dir.mkdir(parents=True, exist_ok=True)
            (self.documents_dir / filename).write_bytes(data)
        except OSError as e:
            logger.error("Failed to store document", filename=suggested_name, error=str(e))
            raise DocumentStorageError(f"Failed to store {suggested_name!r}") from e

        logger.info("Document stored", original_name=suggested_name, filename=filename)
        return f"{self.PUBLIC_PREFIX}/{filename}"

    def _resolve(self, path: str) -> Path:
        filename = os.path.basename(path)
        if not filename or not path.startswith(self.PUBLIC_PREFIX):
            raise DocumentStorageError(f"Unknown document path {path!r}")
        return self.documents_dir / filename

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to delete document", path=path, error=str(e))
            raise DocumentStorageError(f"Failed to delete {path!r}") from e

        logger.info("Document deleted", path=path)

    def is_available(self) -> bool:
        try:
            self.documents_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return os.access(self.documents_dir, os.W_OK)
