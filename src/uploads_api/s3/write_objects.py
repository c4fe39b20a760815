"""Functions for writing objects to an S3 bucket--the "C" and "U" in CRUD."""

from typing import IO, TYPE_CHECKING, Dict, Optional

import boto3

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

PUBLIC_READ_ACL = "public-read"


def upload_s3_object(
    bucket_name: str,
    object_key: str,
    fileobj: IO[bytes],
    content_type: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None,
    acl: Optional[str] = PUBLIC_READ_ACL,
    s3_client: Optional["S3Client"] = None,
) -> None:
    """
    Stream a file-like object to an S3 bucket.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param fileobj: Readable binary file object, positioned at the start of the content.
    :param content_type: The MIME type of the file, e.g. "image/png".
    :param metadata: User metadata stored alongside the object.
    :param acl: Canned ACL applied to the object; None leaves the bucket default.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    """
    s3_client = s3_client or boto3.client("s3")
    extra_args = {"ContentType": content_type or "application/octet-stream"}
    if metadata:
        extra_args["Metadata"] = metadata
    if acl:
        extra_args["ACL"] = acl
    s3_client.upload_fileobj(
        Fileobj=fileobj,
        Bucket=bucket_name,
        Key=object_key,
        ExtraArgs=extra_args,
    )
