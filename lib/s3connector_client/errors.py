from __future__ import annotations


class S3ConnectorError(Exception):
    """Base client error."""


class ConfigurationError(S3ConnectorError):
    """Missing or invalid client configuration."""


class NetworkError(S3ConnectorError):
    """Transport/network layer error."""
