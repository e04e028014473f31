"""
Lambda function to keep users' storage usage in step with their files.
Triggered by the DynamoDB stream of the file records table.
"""
import json
import logging
from boto3.dynamodb.types import TypeDeserializer
from src.core.config import settings
from src.core.exceptions import DynamoDBException
from src.core.logging_config import setup_logging
from src.repositories.user_profile_repository import UserProfileRepository

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

_deserializer = TypeDeserializer()


def handler(event, context):
    """
    Lambda handler for file record stream events.

    INSERT adds the new record's file_size to its owner's storage_used,
    REMOVE subtracts the old record's file_size. Other events are ignored.

    Records are applied in order. On a DynamoDB error processing stops and the
    failed record is reported in batchItemFailures, so the stream redelivers
    from that record on and already applied records are not counted twice.
    Requires ReportBatchItemFailures on the event source mapping.

    Args:
        event: DynamoDB stream event
        context: Lambda context object

    Returns:
        dict: Processing result with the number of applied records and batchItemFailures
    """
    user_profile_repo = UserProfileRepository()
    applied = 0
    failures = []

    for record in event.get('Records', []):
        change = _storage_change(record)
        if change is None:
            continue

        user_id, delta = change
        try:
            user_profile_repo.adjust_storage_used(user_id, delta)
        except DynamoDBException as e:
            logger.error(
                "DynamoDB error on record %s after %d applied change(s): %s",
                record.get('eventID'), applied, e.message
            )
            failures.append({'itemIdentifier': record['dynamodb']['SequenceNumber']})
            break
        applied += 1
        logger.info("Adjusted storage of user %s by %d bytes (%s)", user_id, delta, record['eventName'])

    return {
        'statusCode': 500 if failures else 200,
        'body': json.dumps({
            'message': f'Applied {applied} storage change(s)',
            'records_applied': applied
        }),
        'batchItemFailures': failures
    }


def _storage_change(record: dict):
    """
    Extract (user_id, delta) from a stream record.

    Returns:
        Tuple of user id and signed byte delta, or None for records that do not change usage
    """
    event_name = record.get('eventName')
    images = record.get('dynamodb', {})

    if event_name == 'INSERT':
        image, sign = images.get('NewImage'), 1
    elif event_name == 'REMOVE':
        image, sign = images.get('OldImage'), -1
    else:
        return None

    if not image:
        logger.warning("Stream record %s without %s image, skipped", record.get('eventID'), event_name)
        return None

    item = {key: _deserializer.deserialize(value) for key, value in image.items()}
    size = int(item.get('file_size', 0))
    if size == 0:
        return None
    return item['user_id'], sign * size
