"""
File Service for upload validation.
Checks file size and type against the configured upload limits.
"""
import fnmatch
import os
from typing import Dict, List
from src.core import config
from src.core.exceptions import FileTooLargeException, UnsupportedFileTypeException
from src.models.upload_task import FileIdentity


class FileService:
    """Service for file validation operations."""

    def __init__(self, max_file_size_bytes: int = None, accepted_mime_types: Dict[str, List[str]] = None):
        self.max_file_size_bytes = max_file_size_bytes or config.settings.max_file_size_bytes
        self.accepted_mime_types = accepted_mime_types or config.settings.accepted_mime_types

    def validate_file(self, file: FileIdentity) -> None:
        """
        Validate one file before upload.

        Args:
            file: Name, size and MIME type of the file

        Raises:
            FileTooLargeException: If the file exceeds the maximum size
            UnsupportedFileTypeException: If neither type nor extension is accepted
        """
        self.validate_size(file)
        self.validate_type(file)

    def validate_size(self, file: FileIdentity) -> None:
        if file.size > self.max_file_size_bytes:
            raise FileTooLargeException(
                f"File '{file.name}' ({file.size / (1024 * 1024):.2f}MB) exceeds maximum allowed size "
                f"of {self.max_file_size_bytes / (1024 * 1024):.0f}MB"
            )

    def validate_type(self, file: FileIdentity) -> None:
        """
        A file is accepted when its MIME type matches a configured pattern
        (wildcards allowed, e.g. image/*) or its extension is listed for any pattern.
        """
        content_type = (file.content_type or "").lower()
        extension = os.path.splitext(file.name)[1].lower()

        for pattern, extensions in self.accepted_mime_types.items():
            if content_type and fnmatch.fnmatch(content_type, pattern.lower()):
                return
            if extension and extension in (ext.lower() for ext in extensions):
                return

        raise UnsupportedFileTypeException(
            f"File '{file.name}' has unsupported type '{file.content_type}'"
        )
