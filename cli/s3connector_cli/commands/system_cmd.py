from __future__ import annotations

from datetime import datetime, timezone

import typer
from s3connector_client import Success

from .. import console
from ..config import load_config
from ..http import make_client
from ..output import emit
from .objects_cmd import BASE_URL_OPT, JSON_OPT, PROFILE_OPT


def _emit(level: str, msg: str, *, json_mode: bool) -> None:
    if json_mode:
        return
    if level == "ok":
        console.ok(msg)
    elif level == "warn":
        console.warn(msg)
    elif level == "err":
        console.err(msg)
    else:
        console.info(msg)


def _system_call(name: str, profile: str | None, base_url: str | None, json_out: bool) -> None:
    with make_client(load_config(), profile=profile, base_url_override=base_url) as client:
        result = getattr(client, name)()
    emit(result, json_out=json_out)
    if not json_out and result.data is not None:
        console.print_json(result.data)


def health(
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
) -> None:
    """Check S3 Connector health."""
    _system_call("health", profile, base_url, json_out)


def config_check(
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
) -> None:
    """Validate the remote storage configuration."""
    _system_call("config_check", profile, base_url, json_out)


def bucket_info(
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
) -> None:
    """Show bucket information."""
    _system_call("bucket_info", profile, base_url, json_out)


def cleanup_temp(
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
) -> None:
    """Remove temporary files on the server."""
    _system_call("cleanup_temp", profile, base_url, json_out)


def info(
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
) -> None:
    """Show local client settings."""
    with make_client(load_config(), profile=profile, base_url_override=base_url) as client:
        data = client.service_info()
    if json_out:
        console.print_json(data)
        return
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        console.print(f"  {key}: {value}")


def test_service(
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
) -> None:
    """Run the connectivity self-test: settings, API key, connection and health."""
    client = make_client(load_config(), profile=profile, base_url_override=base_url)
    result: dict[str, object] = {"checked_at": datetime.now(timezone.utc).isoformat()}

    with client:
        service = client.service_info()
        result["service"] = service
        _emit("ok", "Client created", json_mode=json_out)
        if not json_out:
            console.print(f"  base_url: {service['base_url']}")
            console.print(f"  api_key: {service['api_key_prefix']}")
            console.print(f"  timeout: {service['timeout']}s")
            console.print(f"  logging: {'enabled' if service['logging_enabled'] else 'disabled'}")

        key_valid = client.validate_api_key()
        result["api_key_valid"] = key_valid
        _emit("ok" if key_valid else "warn", f"API key valid: {'yes' if key_valid else 'no'}", json_mode=json_out)

        connection = client.test_connection()
        result["connection"] = connection.to_dict()
        if connection.connected:
            _emit("ok", f"{connection.message} (bucket status: {connection.health_status})", json_mode=json_out)
        else:
            _emit("err", f"{connection.message}: {connection.error}", json_mode=json_out)

        health_result = client.health()
        result["health"] = health_result.to_dict()
        if isinstance(health_result, Success):
            status = health_result.data.get("bucket_status") if isinstance(health_result.data, dict) else None
            _emit("ok", f"Health check passed: {health_result.message or 'ok'} (bucket status: {status or 'unknown'})",
                  json_mode=json_out)
        else:
            _emit("err", f"Health check failed: {health_result.error}", json_mode=json_out)

    if json_out:
        console.print_json(result)
    if not connection.connected:
        raise typer.Exit(code=1)
