"""
BroTech Admin Core
==================

Shared services for the admin modules: configuration, the record store
gateway, blob storage, authentication and logging.
"""

from .config import Config, get_config_value
from .errors import (
    AdminError, AuthenticationFailed, NotFound, PermissionDenied, Unavailable, ValidationError
)
from .logging_service import LoggingService
from .store import SERVER_TIMESTAMP, RecordCollection, RecordStore, get_store

__all__ = [
    'Config', 'get_config_value',
    'AdminError', 'AuthenticationFailed', 'NotFound', 'PermissionDenied', 'Unavailable', 'ValidationError',
    'LoggingService',
    'SERVER_TIMESTAMP', 'RecordCollection', 'RecordStore', 'get_store',
]
