from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from s3connector_client.config_types import DEFAULT_BASE_URL

from . import console

APP_NAME = "s3connector"
CONFIG_FILENAME = "config.toml"

ENV_BASE_URL = "S3_CONNECTOR_BASE_URL"
ENV_API_KEY = "S3_CONNECTOR_API_KEY"
ENV_TIMEOUT = "S3_CONNECTOR_TIMEOUT"
ENV_ENABLE_LOGGING = "S3_CONNECTOR_ENABLE_LOGGING"
ENV_DEFAULT_VISIBILITY = "S3_CONNECTOR_DEFAULT_VISIBILITY"
ENV_PRESIGNED_EXPIRATION = "S3_CONNECTOR_PRESIGNED_EXPIRATION"
ENV_RETRY_ENABLED = "S3_CONNECTOR_RETRY_ENABLED"
ENV_MAX_RETRY_ATTEMPTS = "S3_CONNECTOR_MAX_RETRY_ATTEMPTS"
ENV_RETRY_DELAY = "S3_CONNECTOR_RETRY_DELAY"
ENV_CACHE_ENABLED = "S3_CONNECTOR_CACHE_ENABLED"
ENV_CACHE_TTL = "S3_CONNECTOR_CACHE_TTL"

VISIBILITIES = ("private", "public-read", "public-read-write", "authenticated-read")

_WARNED_BASE_URL_SCHEME = False


@dataclass
class RetrySettings:
    enabled: bool = True
    max_attempts: int = 3
    delay: int = 1000


@dataclass
class CacheSettings:
    enabled: bool = False
    ttl: int = 300


@dataclass
class AppConfig:
    base_url: str
    api_key: str = ""
    timeout: int = 30
    enable_logging: bool = True
    default_visibility: str = "private"
    default_presigned_expiration: int = 3600
    retry: RetrySettings = field(default_factory=RetrySettings)
    cache: CacheSettings = field(default_factory=CacheSettings)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig(base_url=DEFAULT_BASE_URL)


def normalize_base_url(raw: str | None, *, warn: bool = False) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"

    normalized = f"{scheme}{value}"
    if warn:
        _warn_missing_scheme(normalized)
    return normalized


def _warn_missing_scheme(normalized: str) -> None:
    global _WARNED_BASE_URL_SCHEME
    if _WARNED_BASE_URL_SCHEME:
        return
    if not _is_interactive():
        return
    console.warn(f"base_url missing scheme, assuming {normalized}")
    _WARNED_BASE_URL_SCHEME = True


def _is_interactive() -> bool:
    import sys
    return bool(sys.stderr.isatty() or sys.stdout.isatty())


def parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off", ""}:
        return False
    return default


def parse_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return {
        "base_url": cfg.base_url,
        "api_key": cfg.api_key,
        "timeout": cfg.timeout,
        "enable_logging": cfg.enable_logging,
        "default_visibility": cfg.default_visibility,
        "default_presigned_expiration": cfg.default_presigned_expiration,
        "retry": {
            "enabled": cfg.retry.enabled,
            "max_attempts": cfg.retry.max_attempts,
            "delay": cfg.retry.delay,
        },
        "cache": {
            "enabled": cfg.cache.enabled,
            "ttl": cfg.cache.ttl,
        },
    }


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    base_url = normalize_base_url(str(data.get("base_url") or ""), warn=True)
    if base_url:
        cfg.base_url = base_url
    cfg.api_key = str(data.get("api_key") or "").strip()
    cfg.timeout = parse_int(data.get("timeout"), cfg.timeout)
    cfg.enable_logging = parse_bool(data.get("enable_logging"), cfg.enable_logging)
    cfg.default_visibility = str(data.get("default_visibility") or cfg.default_visibility)
    cfg.default_presigned_expiration = parse_int(
        data.get("default_presigned_expiration"), cfg.default_presigned_expiration
    )

    retry_raw = data.get("retry") or {}
    if isinstance(retry_raw, dict):
        cfg.retry = RetrySettings(
            enabled=parse_bool(retry_raw.get("enabled"), True),
            max_attempts=parse_int(retry_raw.get("max_attempts"), 3),
            delay=parse_int(retry_raw.get("delay"), 1000),
        )
    cache_raw = data.get("cache") or {}
    if isinstance(cache_raw, dict):
        cfg.cache = CacheSettings(
            enabled=parse_bool(cache_raw.get("enabled"), False),
            ttl=parse_int(cache_raw.get("ttl"), 300),
        )
    return cfg


def apply_env(cfg: AppConfig) -> AppConfig:
    env = os.environ
    if env.get(ENV_BASE_URL, "").strip():
        cfg.base_url = normalize_base_url(env[ENV_BASE_URL], warn=True)
    if env.get(ENV_API_KEY, "").strip():
        cfg.api_key = env[ENV_API_KEY].strip()
    cfg.timeout = parse_int(env.get(ENV_TIMEOUT), cfg.timeout)
    cfg.enable_logging = parse_bool(env.get(ENV_ENABLE_LOGGING), cfg.enable_logging)
    if env.get(ENV_DEFAULT_VISIBILITY, "").strip():
        cfg.default_visibility = env[ENV_DEFAULT_VISIBILITY].strip()
    cfg.default_presigned_expiration = parse_int(env.get(ENV_PRESIGNED_EXPIRATION), cfg.default_presigned_expiration)
    cfg.retry.enabled = parse_bool(env.get(ENV_RETRY_ENABLED), cfg.retry.enabled)
    cfg.retry.max_attempts = parse_int(env.get(ENV_MAX_RETRY_ATTEMPTS), cfg.retry.max_attempts)
    cfg.retry.delay = parse_int(env.get(ENV_RETRY_DELAY), cfg.retry.delay)
    cfg.cache.enabled = parse_bool(env.get(ENV_CACHE_ENABLED), cfg.cache.enabled)
    cfg.cache.ttl = parse_int(env.get(ENV_CACHE_TTL), cfg.cache.ttl)
    return cfg


def _read_toml() -> dict[str, Any] | None:
    try:
        with open(config_path(), "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return None


def load_config(*, use_env: bool = True) -> AppConfig:
    data = _read_toml()
    cfg = from_toml(data) if data is not None else default_config()
    return apply_env(cfg) if use_env else cfg


def apply_profile(cfg: AppConfig, profile: str | None) -> AppConfig:
    if not profile:
        return cfg
    data = _read_toml()
    if data is None:
        return cfg

    profiles_raw = data.get("profiles") or {}
    if not isinstance(profiles_raw, dict):
        return cfg
    prof = profiles_raw.get(profile)
    if not isinstance(prof, dict):
        return cfg

    return AppConfig(
        base_url=normalize_base_url(str(prof.get("base_url") or cfg.base_url), warn=True) or cfg.base_url,
        api_key=str(prof.get("api_key") or cfg.api_key).strip(),
        timeout=parse_int(prof.get("timeout"), cfg.timeout),
        enable_logging=cfg.enable_logging,
        default_visibility=cfg.default_visibility,
        default_presigned_expiration=cfg.default_presigned_expiration,
        retry=cfg.retry,
        cache=cfg.cache,
    )


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    existing = _read_toml() or {}
    payload = to_toml(cfg)
    # keep profiles written by hand
    if isinstance(existing.get("profiles"), dict):
        payload["profiles"] = existing["profiles"]
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(payload).encode("utf-8"))
    os.chmod(path, 0o600)
    return path


def mask_secret(value: str) -> str:
    if not value:
        return "(empty)"
    return f"{value[:10]}..."
