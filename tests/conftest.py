"""
Shared test fixtures and utilities.
"""
import os
import boto3
import pytest
import jwt
from datetime import datetime, timedelta
from moto import mock_aws
from src.core import config, dependencies

TEST_USER_ID = "test_user"


@pytest.fixture(autouse=True)
def aws_credentials():
    """Fake AWS credentials so boto3 never reaches a real account."""
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'
    os.environ['AWS_REGION'] = 'us-east-1'
    yield


def make_token(user_id: str = TEST_USER_ID) -> str:
    # Use same secret as in config
    expiration = datetime.utcnow() + timedelta(hours=1)
    payload = {
        "sub": user_id,
        "exp": expiration,
        "iat": datetime.utcnow()
    }
    return jwt.encode(payload, "dev-secret-change-in-production", algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Generate valid JWT token and return authorization headers."""
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def other_user_headers():
    """Authorization headers of a second user."""
    return {"Authorization": f"Bearer {make_token('other_user')}"}


TEST_ENV = {
    'S3_BUCKET_NAME': 'test-bucket',
    'FILE_RECORDS_TABLE_NAME': 'FileRecords-test',
    'USER_PROFILES_TABLE_NAME': 'UserProfiles-test',
    'UPLOAD_STATUS_TABLE_NAME': 'UploadStatus-test',
    'USERS_TABLE_NAME': 'users-test',
    'ENVIRONMENT': 'test'
}


def create_aws_resources():
    """Create the bucket and tables used by the API inside an active moto mock."""
    s3 = boto3.client('s3', region_name='us-east-1')
    s3.create_bucket(Bucket=TEST_ENV['S3_BUCKET_NAME'])
    
    dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
    dynamodb.create_table(
        TableName=TEST_ENV['FILE_RECORDS_TABLE_NAME'],
        KeySchema=[
            {'AttributeName': 'user_id', 'KeyType': 'HASH'},
            {'AttributeName': 'file_id', 'KeyType': 'RANGE'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'user_id', 'AttributeType': 'S'},
            {'AttributeName': 'file_id', 'AttributeType': 'S'},
            {'AttributeName': 'uploaded_at', 'AttributeType': 'S'}
        ],
        GlobalSecondaryIndexes=[{
            'IndexName': 'UserUploadedAtIndex',
            'KeySchema': [
                {'AttributeName': 'user_id', 'KeyType': 'HASH'},
                {'AttributeName': 'uploaded_at', 'KeyType': 'RANGE'}
            ],
            'Projection': {'ProjectionType': 'ALL'}
        }],
        BillingMode='PAY_PER_REQUEST'
    )
    dynamodb.create_table(
        TableName=TEST_ENV['USER_PROFILES_TABLE_NAME'],
        KeySchema=[{'AttributeName': 'user_id', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'user_id', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST'
    )
    dynamodb.create_table(
        TableName=TEST_ENV['UPLOAD_STATUS_TABLE_NAME'],
        KeySchema=[{'AttributeName': 'upload_id', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'upload_id', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST'
    )
    dynamodb.create_table(
        TableName=TEST_ENV['USERS_TABLE_NAME'],
        KeySchema=[{'AttributeName': 'username', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'username', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST'
    )
    return s3, dynamodb


@pytest.fixture
def aws(monkeypatch):
    """
    Mocked AWS account with the API's bucket and tables, and settings and
    dependency caches rebuilt against it.
    """
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    
    with mock_aws():
        s3, dynamodb = create_aws_resources()
        config.settings = config.Settings()
        dependencies.clear_caches()
        yield s3, dynamodb
        dependencies.clear_caches()
    
    config.settings = config.Settings()
