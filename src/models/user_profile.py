"""
User profile domain model.
Holds the plan and storage quota of a user.
"""
from datetime import datetime
from typing import Optional

PLAN_FREE = "free"
PLAN_PREMIUM = "premium"


class UserProfile:
    """Domain model for a user's plan and storage usage."""
    
    def __init__(
        self,
        user_id: str,
        storage_limit: int,
        storage_used: int = 0,
        plan_type: str = PLAN_FREE,
        email: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.user_id = user_id
        self.storage_limit = storage_limit
        self.storage_used = storage_used
        self.plan_type = plan_type
        self.email = email
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or self.created_at
    
    @property
    def storage_available(self) -> int:
        return max(0, self.storage_limit - self.storage_used)
    
    @property
    def storage_percentage(self) -> float:
        if self.storage_limit <= 0:
            return 0.0
        return self.storage_used / self.storage_limit * 100
    
    def __repr__(self):
        return f"UserProfile(user_id={self.user_id}, plan_type={self.plan_type}, storage_used={self.storage_used})"
