"""
Abstract base class for database repositories.
Defines the contract for file record storage operations.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from src.models.file_record import FileRecord


class DBRepository(ABC):
    """Abstract repository interface for file record operations."""
    
    @abstractmethod
    def save(self, record: FileRecord) -> None:
        """Insert a single file record."""
        pass
    
    @abstractmethod
    def find_by_id(self, user_id: str, file_id: str) -> FileRecord:
        """Find one file record owned by a user."""
        pass
    
    @abstractmethod
    def find_by_user_paginated(self, user_id: str, limit: int = 20, next_token: Optional[str] = None) -> Tuple[List[FileRecord], Optional[str]]:
        """Retrieve a user's file records, newest first, with pagination."""
        pass
    
    @abstractmethod
    def delete(self, user_id: str, file_id: str) -> None:
        """Delete one file record."""
        pass
