"""
Config module - Default settings for the seeder.
"""

from .settings import DEFAULT_SETTINGS, BUCKET_PERMISSIONS, IMAGE_USER_AGENT

__all__ = [
    'DEFAULT_SETTINGS',
    'BUCKET_PERMISSIONS',
    'IMAGE_USER_AGENT',
]
