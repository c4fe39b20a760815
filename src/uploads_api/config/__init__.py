"""
Configuration management for the Uploads API.

Contains the Pydantic settings that decide, once at startup, whether uploads
go to S3 or to the local public directory.
"""

from uploads_api.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
