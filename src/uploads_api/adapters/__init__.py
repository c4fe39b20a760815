"""
Adapter layer for the Uploads API.

Contains the storage backends (local disk / S3) and the factory that picks
one of them from the settings.
"""
