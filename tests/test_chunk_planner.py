"""
Unit tests for the chunk planner.
"""
import pytest
from src.services import chunk_planner

MB = 1024 * 1024


class TestChunkPlanner:
    """Test suite for chunk planning."""
    
    def test_plan_splits_file_into_contiguous_chunks(self):
        """25 MB at 10 MB per chunk gives 10, 10 and 5 MB parts."""
        chunks = chunk_planner.plan(25 * MB, 10 * MB, "user-1/1700000000000.mp4")
        
        assert [c.index for c in chunks] == [0, 1, 2]
        assert [c.size_bytes for c in chunks] == [10 * MB, 10 * MB, 5 * MB]
        assert [c.object_key for c in chunks] == [
            "user-1/1700000000000.mp4.part0",
            "user-1/1700000000000.mp4.part1",
            "user-1/1700000000000.mp4.part2"
        ]
    
    def test_single_chunk_keeps_base_key(self):
        chunks = chunk_planner.plan(3 * MB, 5 * MB, "user-1/1700000000000.pdf")
        
        assert len(chunks) == 1
        assert chunks[0].object_key == "user-1/1700000000000.pdf"
        assert (chunks[0].start, chunks[0].end) == (0, 3 * MB)
    
    def test_exact_multiple_has_no_empty_tail(self):
        chunks = chunk_planner.plan(20 * MB, 10 * MB, "k")
        
        assert len(chunks) == 2
        assert chunks[-1].end == 20 * MB
    
    def test_zero_byte_file_has_one_empty_chunk(self):
        chunks = chunk_planner.plan(0, 5 * MB, "user-1/1.txt")
        
        assert len(chunks) == 1
        assert chunks[0].size_bytes == 0
        assert chunks[0].object_key == "user-1/1.txt"
    
    @pytest.mark.parametrize("file_size,chunk_size", [
        (1, 1), (7, 3), (1000, 7), (10 * MB + 1, MB), (5 * MB, 5 * MB)
    ])
    def test_chunks_cover_file_exactly(self, file_size, chunk_size):
        """Chunks are dense, contiguous, within chunk_size and sum to the file size."""
        chunks = chunk_planner.plan(file_size, chunk_size, "base")
        
        assert chunks[0].start == 0
        assert chunks[-1].end == file_size
        for previous, current in zip(chunks, chunks[1:]):
            assert current.start == previous.end
            assert current.index == previous.index + 1
        assert all(0 < c.size_bytes <= chunk_size for c in chunks)
        assert sum(c.size_bytes for c in chunks) == file_size
    
    def test_plan_is_deterministic(self):
        assert chunk_planner.plan(123456, 1000, "k") == chunk_planner.plan(123456, 1000, "k")
    
    @pytest.mark.parametrize("file_size,chunk_size", [(10, 0), (10, -1), (-1, 10)])
    def test_invalid_arguments(self, file_size, chunk_size):
        with pytest.raises(ValueError):
            chunk_planner.plan(file_size, chunk_size, "k")
    
    def test_build_base_key_uses_last_extension(self):
        assert chunk_planner.build_base_key("user-1", "holiday.final.JPG", 1700000000123) == "user-1/1700000000123.JPG"
    
    def test_build_base_key_without_extension_uses_whole_name(self):
        assert chunk_planner.build_base_key("user-1", "README", 5) == "user-1/5.README"
    
    def test_chunk_count_is_exact_for_huge_sizes(self):
        assert chunk_planner.chunk_count(2 ** 53 + 1, 1) == 2 ** 53 + 1
        assert chunk_planner.chunk_count(10 ** 18 + 1, 10 ** 9) == 10 ** 9 + 1
    
    def test_object_keys_for_matches_plan(self):
        chunks = chunk_planner.plan(25, 10, "u/1.bin")
        
        assert chunk_planner.object_keys_for("u/1.bin", 3) == [c.object_key for c in chunks]
        assert chunk_planner.object_keys_for("u/1.bin", 1) == ["u/1.bin"]
