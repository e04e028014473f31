"""
Unit tests for the storage usage stream Lambda.
"""
import json
from unittest.mock import Mock, patch
import pytest
from boto3.dynamodb.types import TypeSerializer
from lambda_functions import storage_usage_processor
from src.core.exceptions import DynamoDBException

_serializer = TypeSerializer()


def _image(**attributes):
    return {key: _serializer.serialize(value) for key, value in attributes.items()}


def _stream_record(event_name, new_image=None, old_image=None, sequence_number='100'):
    dynamodb = {'SequenceNumber': sequence_number}
    if new_image is not None:
        dynamodb['NewImage'] = new_image
    if old_image is not None:
        dynamodb['OldImage'] = old_image
    return {'eventID': '1', 'eventName': event_name, 'dynamodb': dynamodb}


class TestStorageUsageProcessor:
    """Test suite for the storage usage processor handler."""
    
    def test_insert_and_remove_adjust_storage(self):
        event = {'Records': [
            _stream_record('INSERT', new_image=_image(user_id='user-1', file_id='f1', file_size=26214400)),
            _stream_record('REMOVE', old_image=_image(user_id='user-1', file_id='f0', file_size=1000)),
            _stream_record('MODIFY', new_image=_image(user_id='user-1', file_id='f1', file_size=26214400))
        ]}
        
        with patch.object(storage_usage_processor, 'UserProfileRepository') as repo_class:
            response = storage_usage_processor.handler(event, None)
        
        repo = repo_class.return_value
        assert [c.args for c in repo.adjust_storage_used.call_args_list] == [
            ('user-1', 26214400),
            ('user-1', -1000)
        ]
        assert response['statusCode'] == 200
        assert json.loads(response['body'])['records_applied'] == 2
        assert response['batchItemFailures'] == []
    
    def test_zero_byte_file_changes_nothing(self):
        event = {'Records': [
            _stream_record('INSERT', new_image=_image(user_id='user-1', file_id='f1', file_size=0))
        ]}
        
        with patch.object(storage_usage_processor, 'UserProfileRepository') as repo_class:
            storage_usage_processor.handler(event, None)
        
        repo_class.return_value.adjust_storage_used.assert_not_called()
    
    def test_database_error_reports_failed_record_for_redelivery(self):
        event = {'Records': [
            _stream_record('INSERT', new_image=_image(user_id='user-1', file_id='f1', file_size=10), sequence_number='101'),
            _stream_record('INSERT', new_image=_image(user_id='user-1', file_id='f2', file_size=20), sequence_number='102'),
            _stream_record('INSERT', new_image=_image(user_id='user-1', file_id='f3', file_size=30), sequence_number='103')
        ]}
        repo = Mock()
        repo.adjust_storage_used.side_effect = [None, DynamoDBException("throttled"), None]
        
        with patch.object(storage_usage_processor, 'UserProfileRepository', return_value=repo):
            response = storage_usage_processor.handler(event, None)
        
        assert response['batchItemFailures'] == [{'itemIdentifier': '102'}]
        assert json.loads(response['body'])['records_applied'] == 1
        # Records after the failed one are left for the redelivery
        assert repo.adjust_storage_used.call_count == 2
    
    def test_redelivery_after_failure_counts_each_file_once(self, aws):
        _, dynamodb = aws
        table = dynamodb.Table('UserProfiles-test')
        table.put_item(Item={'user_id': 'user-1', 'storage_used': 0, 'storage_limit': 2147483648, 'plan_type': 'free'})
        records = [
            _stream_record('INSERT', new_image=_image(user_id='user-1', file_id='f1', file_size=10), sequence_number='101'),
            _stream_record('INSERT', new_image=_image(user_id='user-1', file_id='f2', file_size=20), sequence_number='102')
        ]
        real_adjust = storage_usage_processor.UserProfileRepository.adjust_storage_used
        calls = []
        
        def fail_second(repo, user_id, delta):
            calls.append(delta)
            if len(calls) == 2:
                raise DynamoDBException("throttled")
            real_adjust(repo, user_id, delta)
        
        with patch.object(storage_usage_processor.UserProfileRepository, 'adjust_storage_used', fail_second):
            response = storage_usage_processor.handler({'Records': records}, None)
        
        failed = {f['itemIdentifier'] for f in response['batchItemFailures']}
        redelivered = [r for r in records if r['dynamodb']['SequenceNumber'] >= min(failed)]
        response = storage_usage_processor.handler({'Records': redelivered}, None)
        
        assert response['batchItemFailures'] == []
        assert table.get_item(Key={'user_id': 'user-1'})['Item']['storage_used'] == 30
    
    def test_updates_profile_table(self, aws):
        _, dynamodb = aws
        table = dynamodb.Table('UserProfiles-test')
        table.put_item(Item={'user_id': 'user-1', 'storage_used': 500, 'storage_limit': 2147483648, 'plan_type': 'free'})
        event = {'Records': [
            _stream_record('INSERT', new_image=_image(user_id='user-1', file_id='f1', file_size=250))
        ]}
        
        storage_usage_processor.handler(event, None)
        
        assert table.get_item(Key={'user_id': 'user-1'})['Item']['storage_used'] == 750
