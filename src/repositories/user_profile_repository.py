"""
User Profile Repository for DynamoDB operations.
Handles plan and storage quota records of users.
"""
from datetime import datetime
import boto3
from botocore.exceptions import ClientError
from src.core import config
from src.core.exceptions import DynamoDBException
from src.models.user_profile import UserProfile, PLAN_FREE


class UserProfileRepository:
    """Repository for user profile DynamoDB operations."""

    def __init__(self):
        self.dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region)
        self.table = self.dynamodb.Table(config.settings.user_profiles_table_name)

    def get_or_create(self, user_id: str) -> UserProfile:
        """
        Get a user's profile, creating a free-plan profile on first access.

        Args:
            user_id: User identifier

        Returns:
            UserProfile domain model

        Raises:
            DynamoDBException: If the read or create fails
        """
        try:
            response = self.table.get_item(Key={'user_id': user_id}, ConsistentRead=True)
            if 'Item' in response:
                return self._item_to_profile(response['Item'])

            profile = UserProfile(
                user_id=user_id,
                storage_limit=config.settings.free_storage_limit_bytes
            )
            try:
                self.table.put_item(
                    Item=self._profile_to_item(profile),
                    ConditionExpression='attribute_not_exists(user_id)'
                )
            except ClientError as e:
                if e.response.get('Error', {}).get('Code') != 'ConditionalCheckFailedException':
                    raise
                # Created concurrently, read the winner
                response = self.table.get_item(Key={'user_id': user_id}, ConsistentRead=True)
                return self._item_to_profile(response['Item'])

            return profile

        except ClientError as e:
            raise DynamoDBException(f"Failed to get user profile: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error getting user profile: {str(e)}") from e

    def adjust_storage_used(self, user_id: str, delta: int) -> None:
        """
        Atomically add delta (may be negative) to storage_used.

        Raises:
            DynamoDBException: If update operation fails
        """
        try:
            self.table.update_item(
                Key={'user_id': user_id},
                UpdateExpression="SET #updated_at = :now ADD #storage_used :delta",
                ExpressionAttributeNames={
                    '#storage_used': 'storage_used',
                    '#updated_at': 'updated_at'
                },
                ExpressionAttributeValues={
                    ':delta': delta,
                    ':now': datetime.utcnow().isoformat()
                }
            )
        except ClientError as e:
            raise DynamoDBException(f"Failed to update storage usage: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error updating storage usage: {str(e)}") from e

    def update_plan(self, user_id: str, plan_type: str, storage_limit: int) -> None:
        """
        Set a user's plan and storage limit.

        Raises:
            DynamoDBException: If update operation fails
        """
        try:
            self.table.update_item(
                Key={'user_id': user_id},
                UpdateExpression="SET #plan_type = :plan, #storage_limit = :limit, #updated_at = :now",
                ExpressionAttributeNames={
                    '#plan_type': 'plan_type',
                    '#storage_limit': 'storage_limit',
                    '#updated_at': 'updated_at'
                },
                ExpressionAttributeValues={
                    ':plan': plan_type,
                    ':limit': storage_limit,
                    ':now': datetime.utcnow().isoformat()
                }
            )
        except ClientError as e:
            raise DynamoDBException(f"Failed to update user plan: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error updating user plan: {str(e)}") from e

    def _profile_to_item(self, profile: UserProfile) -> dict:
        item = {
            'user_id': profile.user_id,
            'plan_type': profile.plan_type,
            'storage_limit': profile.storage_limit,
            'storage_used': profile.storage_used,
            'created_at': profile.created_at.isoformat(),
            'updated_at': profile.updated_at.isoformat()
        }
        if profile.email:
            item['email'] = profile.email
        return item

    def _item_to_profile(self, item: dict) -> UserProfile:
        """Convert DynamoDB item to UserProfile domain model."""
        return UserProfile(
            user_id=item['user_id'],
            storage_limit=int(item.get('storage_limit', config.settings.free_storage_limit_bytes)),
            storage_used=int(item.get('storage_used', 0)),
            plan_type=item.get('plan_type', PLAN_FREE),
            email=item.get('email'),
            created_at=datetime.fromisoformat(item['created_at']) if 'created_at' in item else None,
            updated_at=datetime.fromisoformat(item['updated_at']) if 'updated_at' in item else None
        )
