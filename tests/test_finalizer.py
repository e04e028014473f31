"""
Unit tests for Finalizer.
"""
from unittest.mock import Mock
import pytest
from src.core.exceptions import CommitException, DynamoDBException, S3Exception
from src.models.file_record import FileRecord
from src.models.upload_task import UploadTask, FileIdentity
from src.services import chunk_planner
from src.services.finalizer import Finalizer

MB = 1024 * 1024


@pytest.fixture
def task():
    task = UploadTask("upload-1", FileIdentity("movie.mp4", 25 * MB, "video/mp4"))
    task.start(3, "user-1/1700000000000.mp4.part0")
    return task


@pytest.fixture
def chunks():
    return chunk_planner.plan(25 * MB, 10 * MB, "user-1/1700000000000.mp4")


class TestFinalizer:
    """Test suite for committing uploaded files."""
    
    @pytest.mark.asyncio
    async def test_commit_inserts_one_record_for_first_chunk(self, task, chunks):
        s3_repository = Mock()
        s3_repository.get_reference.return_value = "https://example.com/part0"
        db_repository = Mock()
        
        record = await Finalizer(s3_repository, db_repository).commit(task, chunks, "user-1")
        
        s3_repository.get_reference.assert_called_once_with("user-1/1700000000000.mp4.part0")
        db_repository.save.assert_called_once_with(record)
        assert isinstance(record, FileRecord)
        assert record.user_id == "user-1"
        assert record.object_key == "user-1/1700000000000.mp4.part0"
        assert record.file_url == "https://example.com/part0"
        assert record.file_name == "movie.mp4"
        assert record.file_type == "video/mp4"
        assert record.file_size == 25 * MB
        assert record.total_chunks == 3
    
    @pytest.mark.asyncio
    async def test_single_chunk_reference_is_base_key(self, task):
        s3_repository = Mock()
        s3_repository.get_reference.return_value = "https://example.com/file"
        chunks = chunk_planner.plan(100, 5 * MB, "user-1/1.pdf")
        
        record = await Finalizer(s3_repository, Mock()).commit(task, chunks, "user-1")
        
        assert record.object_key == "user-1/1.pdf"
        assert record.total_chunks == 1
    
    @pytest.mark.asyncio
    async def test_reference_failure_skips_insert(self, task, chunks):
        s3_repository = Mock()
        s3_repository.get_reference.side_effect = S3Exception("signing failed")
        db_repository = Mock()
        
        with pytest.raises(CommitException) as exc_info:
            await Finalizer(s3_repository, db_repository).commit(task, chunks, "user-1")
        
        assert exc_info.value.stage == CommitException.REFERENCE
        db_repository.save.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_insert_failure_is_reported(self, task, chunks):
        s3_repository = Mock()
        s3_repository.get_reference.return_value = "https://example.com/part0"
        db_repository = Mock()
        db_repository.save.side_effect = DynamoDBException("throttled")
        
        with pytest.raises(CommitException) as exc_info:
            await Finalizer(s3_repository, db_repository).commit(task, chunks, "user-1")
        
        assert exc_info.value.stage == CommitException.INSERT
        assert "throttled" in exc_info.value.message
