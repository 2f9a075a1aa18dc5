from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

import httpx

from .config_types import MIN_API_KEY_LENGTH, ClientConfig, api_key_preview
from .envelope import (
    ContentResult,
    DownloadResult,
    Envelope,
    Failure,
    PartialFailure,
    SavedDownload,
    Success,
)
from .executor import RequestExecutor, RequestObserver
from .files import DiskFileStore, FileSource, LocalFileStore, resolve_file_part
from .transport import Transport

logger = logging.getLogger(__name__)

SERVICE_NAME = "S3 Connector Service"
SERVICE_VERSION = "1.0.0"
DEFAULT_MAX_KEYS = 1000

SUPPORTED_OPERATIONS = [
    "upload",
    "download",
    "delete",
    "list",
    "metadata",
    "exists",
    "copy",
    "presigned_url",
    "health",
    "config_check",
    "bucket_info",
    "cleanup_temp",
]


@dataclass(frozen=True)
class ConnectionReport:
    connected: bool
    message: str
    base_url: str
    api_key_preview: str
    health_status: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.connected

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": self.connected,
            "message": self.message,
            "base_url": self.base_url,
            "api_key": self.api_key_preview,
        }
        if self.connected:
            out["health_status"] = self.health_status
        else:
            out["error"] = self.error
        return out


class S3ConnectorClient:
    def __init__(
            self,
            cfg: ClientConfig,
            *,
            transport: httpx.BaseTransport | None = None,
            observer: RequestObserver | None = None,
            file_store: LocalFileStore | None = None,
    ):
        cfg.validate()
        self._x = RequestExecutor(cfg, Transport(transport=transport), observer=observer)
        self._files = file_store or DiskFileStore()

    @property
    def config(self) -> ClientConfig:
        return self._x.config

    def _replace_config(self, **changes: Any) -> "S3ConnectorClient":
        self._x.config = replace(self._x.config, **changes).validate()
        return self

    def get_base_url(self) -> str:
        return self._x.config.base_url

    def set_base_url(self, base_url: str) -> "S3ConnectorClient":
        return self._replace_config(base_url=base_url)

    def set_api_key(self, api_key: str) -> "S3ConnectorClient":
        return self._replace_config(api_key=api_key)

    def set_timeout(self, timeout_s: int) -> "S3ConnectorClient":
        return self._replace_config(timeout_s=timeout_s)

    def set_logging(self, enabled: bool) -> "S3ConnectorClient":
        return self._replace_config(logging_enabled=bool(enabled))

    def close(self) -> None:
        self._x.close()

    def __enter__(self) -> "S3ConnectorClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- storage operations ---
    def upload(
            self,
            file: FileSource,
            path: str,
            *,
            metadata: dict[str, Any] | None = None,
            visibility: str | None = None,
            filename: str | None = None,
    ) -> Envelope:
        try:
            part = resolve_file_part("file", file, self._files, default_name=filename or _basename(path))
        except OSError as exc:
            return Failure(error=str(exc), status_code=0)

        fields: dict[str, Any] = {
            "path": path,
            "visibility": visibility or self.config.default_visibility,
        }
        if metadata:
            fields["metadata"] = metadata
        return self._x.execute_with_files("post", "s3/upload", fields, [part])

    def download(self, key: str, local_path: str | None = None) -> DownloadResult:
        response = self._x.execute("post", "s3/download", {"key": key})
        if not isinstance(response, Success) or not local_path:
            return response

        content = self._x.fetch_raw_content(key)
        if isinstance(content, Failure):
            logger.warning("download of %s succeeded but content fetch failed: %s", key, content.error)
            return PartialFailure(
                error=content.error,
                metadata=response,
                local_path=local_path,
                status_code=content.status_code,
            )

        try:
            self._files.write_bytes(local_path, content.data)
        except OSError as exc:
            logger.warning("could not save %s to %s: %s", key, local_path, exc)
            return PartialFailure(error=str(exc), metadata=response, local_path=local_path)

        return SavedDownload(
            local_path=local_path,
            size=len(content.data),
            data=response.data,
            message="File downloaded and saved successfully",
            status_code=response.status_code,
            raw_response=response.raw_response,
        )

    def download_file_content(self, key: str) -> ContentResult:
        return self._x.fetch_raw_content(key)

    def delete(self, key: str) -> Envelope:
        return self._x.execute("delete", "s3/delete", {"key": key})

    def list_objects(self, prefix: str = "", max_keys: int = DEFAULT_MAX_KEYS) -> Envelope:
        params: dict[str, Any] = {}
        if prefix:
            params["prefix"] = prefix
        if max_keys != DEFAULT_MAX_KEYS:
            params["max_keys"] = int(max_keys)
        return self._x.execute("get", "s3/list", params)

    def metadata(self, key: str) -> Envelope:
        return self._x.execute("get", "s3/metadata", {"key": key})

    def exists(self, key: str) -> Envelope:
        return self._x.execute("get", "s3/exists", {"key": key})

    def copy(self, source_key: str, destination_key: str, *, metadata: dict[str, Any] | None = None) -> Envelope:
        body: dict[str, Any] = {"source_key": source_key, "destination_key": destination_key}
        if metadata:
            body["metadata"] = metadata
        return self._x.execute("post", "s3/copy", body)

    def presigned_url(self, key: str, *, expires_in: int | None = None, operation: str = "getObject") -> Envelope:
        body = {
            "key": key,
            "expires_in": int(expires_in if expires_in is not None else self.config.presigned_expiration_s),
            "operation": operation,
        }
        return self._x.execute("get", "s3/presigned-url", body)

    # --- system operations ---
    def health(self) -> Envelope:
        return self._x.execute("get", "s3/health")

    def config_check(self) -> Envelope:
        return self._x.execute("get", "s3/config-check")

    def bucket_info(self) -> Envelope:
        return self._x.execute("get", "s3/bucket-info")

    def cleanup_temp(self) -> Envelope:
        return self._x.execute("post", "s3/cleanup-temp")

    # --- utilities ---
    def test_connection(self) -> ConnectionReport:
        health = self.health()
        cfg = self.config
        if isinstance(health, Success):
            status = health.data.get("bucket_status") if isinstance(health.data, dict) else None
            return ConnectionReport(
                connected=True,
                message="Successfully connected to S3 Connector",
                base_url=cfg.base_url,
                api_key_preview=api_key_preview(cfg.api_key),
                health_status=status or "unknown",
            )
        return ConnectionReport(
            connected=False,
            message="Failed to connect to S3 Connector",
            base_url=cfg.base_url,
            api_key_preview=api_key_preview(cfg.api_key),
            error=health.error or "Unknown error",
        )

    def service_info(self) -> dict[str, Any]:
        cfg = self.config
        return {
            "service_name": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "base_url": cfg.base_url,
            "api_key_prefix": api_key_preview(cfg.api_key),
            "timeout": cfg.timeout_s,
            "logging_enabled": cfg.logging_enabled,
            "supported_operations": list(SUPPORTED_OPERATIONS),
        }

    def validate_api_key(self) -> bool:
        key = self.config.api_key
        return bool(key) and len(key) >= MIN_API_KEY_LENGTH


def _basename(path: str) -> str | None:
    name = (path or "").rstrip("/").rsplit("/", 1)[-1]
    return name or None
