"""Thin boto3 wrappers for the S3 operations the uploads API needs."""
