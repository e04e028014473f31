"""
Authentication service for user login and JWT token management.
The token subject is the user id that namespaces stored objects and records.
"""
import logging
import jwt
import bcrypt
import boto3
from botocore.exceptions import ClientError
from datetime import datetime, timedelta
from typing import Optional
from src.core import config
from src.core.exceptions import DynamoDBException

logger = logging.getLogger(__name__)


def token_lifetime_seconds() -> int:
    return config.settings.jwt_expiration_hours * 3600


def create_access_token(user_id: str, username: Optional[str] = None) -> str:
    """
    Issue a signed access token whose subject is user_id.

    Args:
        user_id: Owner of the files the token grants access to
        username: Login name, carried as an informational claim

    Returns:
        Encoded JWT token string
    """
    settings = config.settings
    issued_at = datetime.utcnow()
    payload = {
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=token_lifetime_seconds())
    }
    if username:
        payload["username"] = username

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def authenticate_user(username: str, password: str) -> Optional[dict]:
    """
    Check credentials against the users table.

    Users stored without a user_id attribute are identified by their username.

    Returns:
        User dict with a user_id key, or None if the credentials are wrong

    Raises:
        DynamoDBException: If the users table cannot be read
    """
    dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region)
    table = dynamodb.Table(config.settings.users_table_name)

    try:
        user = table.get_item(Key={'username': username}).get('Item')
    except ClientError as e:
        raise DynamoDBException(f"Failed to look up user: {str(e)}") from e

    if not user or not verify_password(password, user['password_hash']):
        logger.warning("Rejected login for %s", username)
        return None

    user.setdefault('user_id', user['username'])
    return user
