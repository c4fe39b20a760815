"""Functions for deleting objects from an S3 bucket--the "D" in CRUD."""

from typing import TYPE_CHECKING, Any, Dict, Optional

import boto3

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


def delete_s3_object(
    bucket_name: str,
    object_key: str,
    s3_client: Optional["S3Client"] = None,
) -> Dict[str, Any]:
    """
    Delete an object from an S3 bucket.

    S3 acknowledges deletes of missing keys too, so the response says the
    request was accepted, not that an object existed.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    :return: The DeleteObject response.
    """
    s3_client = s3_client or boto3.client("s3")
    return s3_client.delete_object(Bucket=bucket_name, Key=object_key)
