from .client import ConnectionReport, S3ConnectorClient
from .config_types import CacheConfig, ClientConfig, RetryConfig
from .envelope import Content, Failure, PartialFailure, SavedDownload, Success
from .errors import ConfigurationError, NetworkError, S3ConnectorError
from .files import DiskFileStore, FilePart

__all__ = [
    "S3ConnectorClient",
    "ConnectionReport",
    "ClientConfig",
    "RetryConfig",
    "CacheConfig",
    "Success",
    "Failure",
    "PartialFailure",
    "SavedDownload",
    "Content",
    "S3ConnectorError",
    "ConfigurationError",
    "NetworkError",
    "DiskFileStore",
    "FilePart",
]
