from __future__ import annotations

from dataclasses import replace

import typer
from s3connector_client import S3ConnectorClient
from s3connector_client.config_types import CacheConfig, ClientConfig, RetryConfig
from s3connector_client.errors import ConfigurationError

from . import console
from .config import AppConfig, apply_profile, normalize_base_url


def client_config(cfg: AppConfig) -> ClientConfig:
    return ClientConfig(
        base_url=cfg.base_url,
        api_key=cfg.api_key,
        timeout_s=cfg.timeout,
        logging_enabled=cfg.enable_logging,
        default_visibility=cfg.default_visibility,
        presigned_expiration_s=cfg.default_presigned_expiration,
        retry=RetryConfig(
            enabled=cfg.retry.enabled,
            max_attempts=cfg.retry.max_attempts,
            delay_ms=cfg.retry.delay,
        ),
        cache=CacheConfig(enabled=cfg.cache.enabled, ttl_s=cfg.cache.ttl),
    )


def make_client(
    cfg: AppConfig,
    *,
    profile: str | None,
    base_url_override: str | None,
) -> S3ConnectorClient:
    effective_cfg = apply_profile(cfg, profile)
    if base_url_override:
        effective_cfg = replace(effective_cfg, base_url=normalize_base_url(base_url_override, warn=True))
    try:
        return S3ConnectorClient(client_config(effective_cfg))
    except ConfigurationError as exc:
        console.err(str(exc))
        raise typer.Exit(code=2)
