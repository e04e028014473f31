"""
S3 Repository for file storage operations.
Handles chunk uploads, object references and deletion in Amazon S3.
"""
from typing import List
import boto3
from botocore.exceptions import ClientError
from src.core import config
from src.core.exceptions import S3Exception, ObjectExistsException

CACHE_CONTROL = "max-age=31536000"
DELETE_BATCH_SIZE = 1000


class S3Repository:
    """Repository for S3 file operations."""

    def __init__(self):
        self.s3_client = boto3.client('s3', region_name=config.settings.aws_region)
        self.bucket_name = config.settings.s3_bucket_name

    def put_object(self, key: str, data: bytes, content_type: str, allow_overwrite: bool = False) -> dict:
        """
        Upload bytes to S3 under the given key.

        Args:
            key: S3 object key
            data: Object content
            content_type: MIME type stored with the object
            allow_overwrite: Replace an existing object at the key instead of failing

        Returns:
            dict: Upload metadata including s3_key, size and etag

        Raises:
            ObjectExistsException: If the key is taken and overwrite is not allowed
            S3Exception: If upload fails
        """
        try:
            if not allow_overwrite and self.object_exists(key):
                raise ObjectExistsException(f"Object already exists at {key}")

            response = self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=CACHE_CONTROL
            )

            return {
                's3_key': key,
                'size': len(data),
                'etag': response.get('ETag', '').strip('"')
            }

        except S3Exception:
            raise
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code')
            raise S3Exception(f"Failed to upload object to S3: {str(e)}", code=code) from e
        except Exception as e:
            raise S3Exception(f"Unexpected error during S3 upload: {str(e)}") from e

    def object_exists(self, key: str) -> bool:
        """
        Check whether an object exists.

        Raises:
            S3Exception: If the check fails for a reason other than a missing key
        """
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code')
            if code in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise S3Exception(f"Failed to check object in S3: {str(e)}", code=code) from e

    def get_reference(self, key: str) -> str:
        """
        Get a retrievable URL for an object.

        Public buckets get a plain object URL, private buckets a presigned GET URL.

        Raises:
            S3Exception: If URL generation fails
        """
        try:
            if config.settings.s3_public_urls:
                return f"https://{self.bucket_name}.s3.{config.settings.aws_region}.amazonaws.com/{key}"

            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': key},
                ExpiresIn=config.settings.s3_url_expiration_seconds
            )
        except ClientError as e:
            raise S3Exception(f"Failed to generate URL for {key}: {str(e)}") from e
        except Exception as e:
            raise S3Exception(f"Unexpected error generating URL for {key}: {str(e)}") from e

    def delete_objects(self, keys: List[str]) -> None:
        """
        Delete objects from S3.

        S3 accepts at most 1000 keys per request; larger lists are split.

        Raises:
            S3Exception: If any object could not be deleted
        """
        try:
            for i in range(0, len(keys), DELETE_BATCH_SIZE):
                batch = keys[i:i + DELETE_BATCH_SIZE]
                response = self.s3_client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={'Objects': [{'Key': key} for key in batch], 'Quiet': True}
                )
                errors = response.get('Errors', [])
                if errors:
                    failed = ', '.join(error['Key'] for error in errors)
                    raise S3Exception(f"Failed to delete objects from S3: {failed}")
        except S3Exception:
            raise
        except ClientError as e:
            raise S3Exception(f"Failed to delete objects from S3: {str(e)}") from e
        except Exception as e:
            raise S3Exception(f"Unexpected error deleting objects from S3: {str(e)}") from e

