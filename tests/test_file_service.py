"""
Unit tests for FileService.
Tests file size and type validation.
"""
import pytest
from src.services.file_service import FileService
from src.models.upload_task import FileIdentity
from src.core.exceptions import FileTooLargeException, UnsupportedFileTypeException

MB = 1024 * 1024
GB = 1024 * MB


class TestFileService:
    """Test suite for FileService."""
    
    @pytest.fixture
    def file_service(self):
        """Create FileService instance with the default limits."""
        return FileService()
    
    @pytest.mark.parametrize("name,content_type", [
        ("holiday.jpg", "image/jpeg"),
        ("clip.mov", "video/quicktime"),
        ("report.pdf", "application/pdf"),
        ("notes.txt", "text/plain"),
        ("letter.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document")
    ])
    def test_accepted_files(self, file_service, name, content_type):
        file_service.validate_file(FileIdentity(name, 10 * MB, content_type))
        # No exception means success
    
    def test_accepted_by_extension_when_type_is_generic(self, file_service):
        """Browsers sometimes send application/octet-stream for known extensions."""
        file_service.validate_file(FileIdentity("scan.PNG", MB, "application/octet-stream"))
    
    def test_unsupported_type(self, file_service):
        with pytest.raises(UnsupportedFileTypeException) as exc_info:
            file_service.validate_file(FileIdentity("setup.exe", MB, "application/x-msdownload"))
        assert "setup.exe" in exc_info.value.message
    
    def test_file_at_limit_is_accepted(self, file_service):
        file_service.validate_file(FileIdentity("movie.mp4", 2 * GB, "video/mp4"))
    
    def test_file_too_large(self, file_service):
        with pytest.raises(FileTooLargeException) as exc_info:
            file_service.validate_file(FileIdentity("movie.mp4", 2 * GB + 1, "video/mp4"))
        assert "exceeds maximum allowed size" in exc_info.value.message
    
    def test_size_is_checked_before_type(self, file_service):
        with pytest.raises(FileTooLargeException):
            file_service.validate_file(FileIdentity("huge.exe", 3 * GB, "application/x-msdownload"))
    
    def test_custom_limits(self):
        file_service = FileService(max_file_size_bytes=MB, accepted_mime_types={'text/csv': ['.csv']})
        
        file_service.validate_file(FileIdentity("data.csv", MB, "text/csv"))
        with pytest.raises(UnsupportedFileTypeException):
            file_service.validate_file(FileIdentity("photo.png", 10, "image/png"))
        with pytest.raises(FileTooLargeException):
            file_service.validate_file(FileIdentity("data.csv", MB + 1, "text/csv"))
