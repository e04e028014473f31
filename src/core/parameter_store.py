"""
AWS Systems Manager Parameter Store helper.
Resolves the service's secrets (JWT signing key, payment gateway key) per environment.
"""
import logging
from functools import lru_cache
import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

PARAMETER_PREFIX = "/media-vault-api"


def parameter_name(environment: str, secret: str) -> str:
    """Full parameter name, e.g. /media-vault-api/dev/jwt-secret."""
    return f"{PARAMETER_PREFIX}/{environment}/{secret}"


@lru_cache(maxsize=10)
def get_parameter(name: str, region: str = "us-east-1") -> str:
    """
    Fetch a decrypted parameter. Successful lookups are cached per process.

    Raises:
        ClientError: If the parameter does not exist or access is denied
        BotoCoreError: If Parameter Store cannot be reached
    """
    ssm = boto3.client('ssm', region_name=region)
    response = ssm.get_parameter(Name=name, WithDecryption=True)
    return response['Parameter']['Value']


def get_secret(environment: str, secret: str, region: str, fallback: str) -> str:
    """
    Resolve an environment secret, using fallback when Parameter Store has none.

    Args:
        environment: Deployment stage (dev, test, prod)
        secret: Parameter leaf name, e.g. jwt-secret
        region: AWS region of the Parameter Store
        fallback: Value used for local development

    Returns:
        The parameter value, or fallback
    """
    name = parameter_name(environment, secret)
    try:
        return get_parameter(name, region)
    except (ClientError, BotoCoreError) as e:
        logger.warning("Parameter %s unavailable, using fallback: %s", name, e)
        return fallback
