"""
DynamoDB Repository for file record storage.
Handles CRUD operations for file metadata in DynamoDB.
"""
from datetime import datetime
from typing import List, Optional, Tuple
import json
import base64
import boto3
from botocore.exceptions import ClientError
from src.core import config
from src.core.exceptions import DynamoDBException, FileNotFoundException, ValidationException
from src.models.file_record import FileRecord
from src.repositories.db_repository import DBRepository

UPLOADED_AT_INDEX = 'UserUploadedAtIndex'


class DynamoRepository(DBRepository):
    """Repository for DynamoDB file record operations."""
    
    def __init__(self):
        self.dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region)
        self.table = self.dynamodb.Table(config.settings.file_records_table_name)
    
    def save(self, record: FileRecord) -> None:
        """
        Insert file record into DynamoDB.
        
        The table's stream feeds the storage usage processor, which adds
        file_size to the owner's storage_used.
        
        Args:
            record: FileRecord domain model
            
        Raises:
            DynamoDBException: If the record exists or save operation fails
        """
        try:
            self.table.put_item(
                Item=self._record_to_item(record),
                ConditionExpression='attribute_not_exists(file_id)'
            )
            
        except ClientError as e:
            raise DynamoDBException(f"Failed to save file record: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error saving file record: {str(e)}") from e
    
    def find_by_id(self, user_id: str, file_id: str) -> FileRecord:
        """
        Find one file record owned by a user.
        
        Raises:
            FileNotFoundException: If no record exists for this user and id
            DynamoDBException: If query fails
        """
        try:
            response = self.table.get_item(Key={'user_id': user_id, 'file_id': file_id})
            
            if 'Item' not in response:
                raise FileNotFoundException(f"File '{file_id}' not found")
            
            return self._item_to_record(response['Item'])
            
        except FileNotFoundException:
            raise
        except ClientError as e:
            raise DynamoDBException(f"Failed to get file record: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error getting file record: {str(e)}") from e
    
    def find_by_user_paginated(self, user_id: str, limit: int = 20, next_token: Optional[str] = None) -> Tuple[List[FileRecord], Optional[str]]:
        """
        Retrieve a user's files, newest first, using the uploaded_at GSI.
        
        Args:
            user_id: Owner of the files
            limit: Maximum number of items to return
            next_token: Base64-encoded pagination token from previous request
            
        Returns:
            Tuple of (list of FileRecord objects, next_token or None)
            
        Raises:
            DynamoDBException: If query fails
            ValidationException: If next_token is invalid
        """
        try:
            query_kwargs = {
                'IndexName': UPLOADED_AT_INDEX,
                'KeyConditionExpression': 'user_id = :uid',
                'ExpressionAttributeValues': {':uid': user_id},
                'Limit': min(limit, config.settings.pagination_max_limit),
                'ScanIndexForward': False
            }
            
            if next_token:
                try:
                    last_key = json.loads(base64.urlsafe_b64decode(next_token))
                    query_kwargs['ExclusiveStartKey'] = last_key
                except Exception:
                    raise ValidationException("Invalid pagination token")
            
            response = self.table.query(**query_kwargs)
            items = response.get('Items', [])
            records = [self._item_to_record(item) for item in items]
            
            next_token = None
            if 'LastEvaluatedKey' in response:
                next_token = base64.urlsafe_b64encode(
                    json.dumps(response['LastEvaluatedKey']).encode()
                ).decode()
            
            return records, next_token
            
        except ValidationException:
            raise
        except ClientError as e:
            raise DynamoDBException(f"Failed to query file records: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error querying file records: {str(e)}") from e
    
    def delete(self, user_id: str, file_id: str) -> None:
        """
        Delete one file record. The stream processor releases its storage.
        
        Raises:
            FileNotFoundException: If the record does not exist
            DynamoDBException: If delete fails
        """
        try:
            self.table.delete_item(
                Key={'user_id': user_id, 'file_id': file_id},
                ConditionExpression='attribute_exists(file_id)'
            )
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException':
                raise FileNotFoundException(f"File '{file_id}' not found") from e
            raise DynamoDBException(f"Failed to delete file record: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error deleting file record: {str(e)}") from e
    
    def _record_to_item(self, record: FileRecord) -> dict:
        """Convert FileRecord domain model to DynamoDB item."""
        return {
            'user_id': record.user_id,
            'file_id': record.file_id,
            'file_url': record.file_url,
            'object_key': record.object_key,
            'total_chunks': record.total_chunks,
            'file_name': record.file_name,
            'file_type': record.file_type,
            'file_size': record.file_size,
            'uploaded_at': record.uploaded_at.isoformat()
        }
    
    def _item_to_record(self, item: dict) -> FileRecord:
        """Convert DynamoDB item to FileRecord domain model."""
        return FileRecord(
            file_id=item['file_id'],
            user_id=item['user_id'],
            file_url=item['file_url'],
            object_key=item['object_key'],
            total_chunks=int(item.get('total_chunks', 1)),
            file_name=item['file_name'],
            file_type=item['file_type'],
            file_size=int(item['file_size']),
            uploaded_at=datetime.fromisoformat(item['uploaded_at'])
        )
