"""
Tests for authentication service.
"""
import os
import importlib
import jwt
import bcrypt
import boto3
from datetime import datetime, timedelta
from moto import mock_aws
from src.core import config


def _create_users_table(users: list):
    dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
    dynamodb.create_table(
        TableName='users-test',
        KeySchema=[{'AttributeName': 'username', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'username', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST'
    )
    table = dynamodb.Table('users-test')
    for user in users:
        table.put_item(Item=user)


def _password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


class TestAuthService:
    """Test suite for authentication service."""
    
    @mock_aws
    def test_create_access_token_subject_is_user_id(self):
        """The user id is encoded as the token subject."""
        from src.services.auth_service import create_access_token
        token = create_access_token("user-123")
        
        payload = jwt.decode(token, config.settings.jwt_secret, algorithms=[config.settings.jwt_algorithm])
        
        assert payload["sub"] == "user-123"
        assert "exp" in payload
        assert "iat" in payload
        assert "username" not in payload
    
    @mock_aws
    def test_create_access_token_with_username_claim(self):
        from src.services.auth_service import create_access_token
        token = create_access_token("user-123", "alice")
        
        payload = jwt.decode(token, config.settings.jwt_secret, algorithms=[config.settings.jwt_algorithm])
        
        assert payload["username"] == "alice"
    
    @mock_aws
    def test_create_access_token_expiration(self):
        """Test token expiration is set correctly."""
        from src.services.auth_service import create_access_token
        before_creation = datetime.utcnow()
        token = create_access_token("user-123")
        
        payload = jwt.decode(token, config.settings.jwt_secret, algorithms=[config.settings.jwt_algorithm])
        
        exp_time = datetime.utcfromtimestamp(payload["exp"])
        expected_exp = before_creation + timedelta(hours=config.settings.jwt_expiration_hours)
        assert abs((exp_time - expected_exp).total_seconds()) < 2
    
    def test_verify_password(self):
        """Matching and non-matching passwords."""
        from src.services.auth_service import verify_password
        hashed = _password_hash("s3cret-pass")
        
        assert verify_password("s3cret-pass", hashed) is True
        assert verify_password("wrong", hashed) is False
    
    @mock_aws
    def test_authenticate_user_defaults_user_id_to_username(self):
        """Users without a user_id attribute are identified by username."""
        _create_users_table([{'username': 'alice', 'password_hash': _password_hash('password123')}])
        os.environ['USERS_TABLE_NAME'] = 'users-test'
        config.settings = config.Settings()
        
        from src.services import auth_service
        importlib.reload(auth_service)
        
        user = auth_service.authenticate_user('alice', 'password123')
        
        assert user is not None
        assert user['user_id'] == 'alice'
        
        del os.environ['USERS_TABLE_NAME']
    
    @mock_aws
    def test_authenticate_user_with_explicit_user_id(self):
        """A stored user_id attribute is kept."""
        _create_users_table([{
            'username': 'bob',
            'user_id': '5f0c2d7e-user',
            'password_hash': _password_hash('password123')
        }])
        os.environ['USERS_TABLE_NAME'] = 'users-test'
        config.settings = config.Settings()
        
        from src.services import auth_service
        importlib.reload(auth_service)
        
        user = auth_service.authenticate_user('bob', 'password123')
        
        assert user['user_id'] == '5f0c2d7e-user'
        
        del os.environ['USERS_TABLE_NAME']
    
    @mock_aws
    def test_authenticate_user_rejects_wrong_password_and_unknown_user(self):
        """Wrong password and unknown user both return None."""
        _create_users_table([{'username': 'alice', 'password_hash': _password_hash('password123')}])
        os.environ['USERS_TABLE_NAME'] = 'users-test'
        config.settings = config.Settings()
        
        from src.services import auth_service
        importlib.reload(auth_service)
        
        assert auth_service.authenticate_user('alice', 'wrong_password') is None
        assert auth_service.authenticate_user('nobody', 'password123') is None
        
        del os.environ['USERS_TABLE_NAME']
