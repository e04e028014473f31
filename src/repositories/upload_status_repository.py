"""
Upload Status Repository for DynamoDB operations.
Persists the per-file upload report that clients poll after a batch is accepted.
"""
from datetime import datetime
from typing import Any, Dict, Optional
import boto3
from botocore.exceptions import ClientError
from src.core import config
from src.core.exceptions import DynamoDBException, UploadNotFoundException
from src.models.upload_status import UploadStatus

_OPTIONAL_FIELDS = ('batch_id', 'object_key', 'file_id', 'error_message')


class UploadStatusRepository:
    """Repository for upload status records keyed by upload_id."""

    def __init__(self):
        self.dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region)
        self.table = self.dynamodb.Table(config.settings.upload_status_table_name)

    def create(self, upload_status: UploadStatus) -> None:
        """
        Store the initial report of a file upload.

        Raises:
            DynamoDBException: If the record cannot be written
        """
        try:
            self.table.put_item(Item=self._upload_status_to_item(upload_status))
        except ClientError as e:
            raise DynamoDBException(f"Failed to create upload status: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error creating upload status: {str(e)}") from e

    def get_by_id(self, upload_id: str) -> Optional[UploadStatus]:
        """
        Retrieve upload status by ID.

        Returns:
            UploadStatus object or None if not found

        Raises:
            DynamoDBException: If the lookup fails
        """
        try:
            response = self.table.get_item(Key={'upload_id': upload_id})
        except ClientError as e:
            raise DynamoDBException(f"Failed to get upload status: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error getting upload status: {str(e)}") from e

        item = response.get('Item')
        return self._item_to_upload_status(item) if item else None

    def update(self, upload_id: str, updates: Dict[str, Any]) -> None:
        """
        Overwrite fields of an existing report and stamp updated_at.

        Fields whose value is None are left untouched.

        Args:
            upload_id: Upload identifier
            updates: Field name to new value

        Raises:
            UploadNotFoundException: If no report exists for upload_id
            DynamoDBException: If the update fails
        """
        fields = {key: value for key, value in updates.items() if value is not None}
        fields['updated_at'] = datetime.utcnow().isoformat()

        assignments = ", ".join(f"#{key} = :{key}" for key in fields)
        try:
            self.table.update_item(
                Key={'upload_id': upload_id},
                UpdateExpression=f"SET {assignments}",
                ConditionExpression="attribute_exists(upload_id)",
                ExpressionAttributeNames={f"#{key}": key for key in fields},
                ExpressionAttributeValues={f":{key}": value for key, value in fields.items()}
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                raise UploadNotFoundException(f"Upload ID '{upload_id}' not found") from e
            raise DynamoDBException(f"Failed to update upload status: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error updating upload status: {str(e)}") from e

    def _upload_status_to_item(self, upload_status: UploadStatus) -> dict:
        item = {
            'upload_id': upload_status.upload_id,
            'status': upload_status.status,
            'filename': upload_status.filename,
            'user_id': upload_status.user_id,
            'created_at': upload_status.created_at.isoformat(),
            'updated_at': upload_status.updated_at.isoformat(),
            'total_chunks': upload_status.total_chunks,
            'completed_chunks': upload_status.completed_chunks,
            'bytes_transferred': upload_status.bytes_transferred,
            'failed_chunks': upload_status.failed_chunks
        }
        for name in _OPTIONAL_FIELDS:
            value = getattr(upload_status, name)
            if value:
                item[name] = value
        return item

    def _item_to_upload_status(self, item: dict) -> UploadStatus:
        """Convert DynamoDB item to UploadStatus domain model."""
        created_at = datetime.fromisoformat(item['created_at'])
        return UploadStatus(
            upload_id=item['upload_id'],
            status=item['status'],
            filename=item['filename'],
            user_id=item['user_id'],
            created_at=created_at,
            updated_at=datetime.fromisoformat(item['updated_at']) if 'updated_at' in item else created_at,
            batch_id=item.get('batch_id'),
            object_key=item.get('object_key'),
            file_id=item.get('file_id'),
            total_chunks=int(item.get('total_chunks', 0)),
            completed_chunks=int(item.get('completed_chunks', 0)),
            bytes_transferred=int(item.get('bytes_transferred', 0)),
            failed_chunks=[int(index) for index in item.get('failed_chunks', [])],
            error_message=item.get('error_message')
        )
