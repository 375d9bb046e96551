"""Upload stage services."""
from .encryption_service import EncryptionService
from .token_service import TokenService
from .storage_service import StorageService
from .replication_service import ReplicationService

__all__ = [
    'EncryptionService',
    'TokenService',
    'StorageService',
    'ReplicationService',
]
