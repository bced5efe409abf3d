"""
Module wrapping the S3 client calls the uploader depends on.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import UploaderConfig
from .exceptions import BatchDeleteError, ListingError, UploadError
from .models import UploadPolicy

logger = logging.getLogger(__name__)


def describe_client_error(error: ClientError) -> Tuple[str, Optional[int]]:
    """Extract a message and HTTP status from a botocore ClientError.

    Args:
        error: The exception to inspect

    Returns:
        Tuple of (message, status code or None)
    """
    status = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
    details = error.response.get('Error', {})
    # An empty body gives Code == str(status) and an empty Message
    message = details.get('Message')
    if not message and status:
        message = f"code: {status}"
    if not message:
        message = details.get('Code') or str(error)
    return message, status


class ObjectStorage:
    """Thin adapter over a boto3 S3 client bound to one bucket."""

    def __init__(self, config: UploaderConfig, client: Any = None):
        """Initialize the object storage adapter.

        Args:
            config: Uploader configuration
            client: Pre-built S3 client. If None, one is created from config.
        """
        self.config = config
        self.bucket = config.bucket
        self.s3_client = client or self._create_client(config)

    @staticmethod
    def _create_client(config: UploaderConfig) -> Any:
        kwargs: Dict[str, Any] = {'region_name': config.region}
        if config.endpoint_url:
            kwargs['endpoint_url'] = config.endpoint_url
        # Empty credentials fall through to boto3's default chain
        if config.access_key and config.secret_key:
            kwargs['aws_access_key_id'] = config.access_key
            kwargs['aws_secret_access_key'] = config.secret_key
        return boto3.client('s3', **kwargs)

    def build_upload_policy(self, key: str) -> UploadPolicy:
        """Issue the policy authorizing a put of ``key``."""
        return UploadPolicy.issue(
            self.bucket,
            key,
            expires=self.config.policy_expires,
            insert_only=not self.config.overwrite,
        )

    def put_file(self, policy: UploadPolicy, key: str, local_path: str) -> None:
        """Upload a single file.

        Args:
            policy: Policy issued for ``key``
            key: Object key
            local_path: Path of the file to upload

        Raises:
            UploadError: If the put is rejected or fails
        """
        if policy.scope != f"{self.bucket}:{key}":
            raise UploadError(local_path, key, f"policy scope {policy.scope} does not cover {key}")
        if policy.expired:
            raise UploadError(local_path, key, "upload policy expired")

        extra_args = {'IfNoneMatch': '*'} if policy.insert_only else {}

        try:
            with open(local_path, 'rb') as body:
                response = self.s3_client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=body,
                    **extra_args
                )
        except ClientError as e:
            message, status = describe_client_error(e)
            raise UploadError(local_path, key, message, status) from e
        except (BotoCoreError, OSError) as e:
            raise UploadError(local_path, key, str(e)) from e

        status = response.get('ResponseMetadata', {}).get('HTTPStatusCode', 200)
        if status != 200:
            raise UploadError(local_path, key, f"code: {status}", status)

    def list_objects(self, prefix: str, marker: Optional[str] = None,
                     limit: int = 1000) -> Tuple[List[str], str]:
        """Fetch one page of keys under a prefix.

        Args:
            prefix: Key prefix to list
            marker: Continuation marker from the previous page
            limit: Maximum number of keys in the page

        Returns:
            Tuple of (keys, next marker). The marker is empty on the last page.

        Raises:
            ListingError: If the page cannot be fetched
        """
        params: Dict[str, Any] = {
            'Bucket': self.bucket,
            'Prefix': prefix,
            'MaxKeys': limit,
        }
        if marker:
            params['ContinuationToken'] = marker

        try:
            response = self.s3_client.list_objects_v2(**params)
        except ClientError as e:
            message, _ = describe_client_error(e)
            raise ListingError(prefix, message) from e
        except BotoCoreError as e:
            raise ListingError(prefix, str(e)) from e

        keys = [item['Key'] for item in response.get('Contents', [])]
        next_marker = ''
        if response.get('IsTruncated'):
            next_marker = response.get('NextContinuationToken') or ''
        return keys, next_marker

    def batch_delete(self, keys: List[str]) -> List[str]:
        """Delete several objects in one request.

        Args:
            keys: Keys to delete

        Returns:
            Keys the service reported as not deleted

        Raises:
            BatchDeleteError: If the request as a whole fails
        """
        try:
            response = self.s3_client.delete_objects(
                Bucket=self.bucket,
                Delete={
                    'Objects': [{'Key': key} for key in keys],
                    'Quiet': True
                }
            )
        except ClientError as e:
            message, _ = describe_client_error(e)
            raise BatchDeleteError(keys, message) from e
        except BotoCoreError as e:
            raise BatchDeleteError(keys, str(e)) from e

        failed = []
        for error in response.get('Errors', []):
            logger.error(f"Error deleting {error.get('Key')}: {error.get('Message')}")
            failed.append(error.get('Key'))
        return failed
