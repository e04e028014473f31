"""
Unit tests for StorageService.
"""
from unittest.mock import Mock
import pytest
from src.models.file_record import FileRecord
from src.models.user_profile import UserProfile, PLAN_FREE
from src.services.storage_service import StorageService
from src.core.exceptions import FileNotFoundException

GB = 1024 * 1024 * 1024


def _record(object_key, total_chunks):
    return FileRecord(
        user_id="user-1",
        file_url="https://example.com/f",
        object_key=object_key,
        file_name="movie.mp4",
        file_type="video/mp4",
        file_size=25 * 1024 * 1024,
        total_chunks=total_chunks,
        file_id="file-1"
    )


class TestStorageService:
    """Test suite for StorageService."""
    
    @pytest.fixture
    def mock_s3_repo(self):
        return Mock()
    
    @pytest.fixture
    def mock_db_repo(self):
        return Mock()
    
    @pytest.fixture
    def mock_profile_repo(self):
        return Mock()
    
    @pytest.fixture
    def storage_service(self, mock_s3_repo, mock_db_repo, mock_profile_repo):
        return StorageService(
            s3_repository=mock_s3_repo,
            db_repository=mock_db_repo,
            user_profile_repository=mock_profile_repo
        )
    
    def test_list_files(self, storage_service, mock_db_repo):
        mock_db_repo.find_by_user_paginated.return_value = ([_record("user-1/1.mp4", 1)], "token-2")
        
        response, token = storage_service.list_files("user-1", 10, "token-1")
        
        mock_db_repo.find_by_user_paginated.assert_called_once_with("user-1", 10, "token-1")
        assert response.count == 1
        assert response.files[0].file_id == "file-1"
        assert response.files[0].file_name == "movie.mp4"
        assert token == "token-2"
    
    def test_delete_multi_chunk_file_removes_every_part(self, storage_service, mock_s3_repo, mock_db_repo):
        mock_db_repo.find_by_id.return_value = _record("user-1/1700000000000.mp4.part0", 3)
        
        storage_service.delete_file("user-1", "file-1")
        
        mock_s3_repo.delete_objects.assert_called_once_with([
            "user-1/1700000000000.mp4.part0",
            "user-1/1700000000000.mp4.part1",
            "user-1/1700000000000.mp4.part2"
        ])
        mock_db_repo.delete.assert_called_once_with("user-1", "file-1")
    
    def test_delete_single_chunk_file(self, storage_service, mock_s3_repo, mock_db_repo):
        mock_db_repo.find_by_id.return_value = _record("user-1/1700000000000.pdf", 1)
        
        storage_service.delete_file("user-1", "file-1")
        
        mock_s3_repo.delete_objects.assert_called_once_with(["user-1/1700000000000.pdf"])
    
    def test_delete_missing_file(self, storage_service, mock_s3_repo, mock_db_repo):
        mock_db_repo.find_by_id.side_effect = FileNotFoundException("File 'file-9' not found")
        
        with pytest.raises(FileNotFoundException):
            storage_service.delete_file("user-1", "file-9")
        mock_s3_repo.delete_objects.assert_not_called()
    
    @pytest.mark.parametrize("used,warning_level", [
        (int(0.5 * GB), None),
        (int(1.8 * GB), None),
        (int(1.9 * GB), "warning"),
        (2 * GB, "full")
    ])
    def test_storage_usage_warning_levels(self, storage_service, mock_profile_repo, used, warning_level):
        mock_profile_repo.get_or_create.return_value = UserProfile("user-1", storage_limit=2 * GB, storage_used=used)
        
        usage = storage_service.get_storage_usage("user-1")
        
        assert usage.plan_type == PLAN_FREE
        assert usage.storage_used == used
        assert usage.storage_available == 2 * GB - used
        assert usage.warning_level == warning_level
