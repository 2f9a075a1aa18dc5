from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table
from s3connector_client import SavedDownload

from .. import console
from ..config import VISIBILITIES, load_config
from ..formatting import format_list_timestamp, format_size, parse_metadata_pairs
from ..http import make_client
from ..output import emit

OBJECTS_USAGE = """\
Usage:
  s3connector upload <file> --path <key> [--visibility private] [--meta k=v ...]
  s3connector download <key> [--out <local path>]
  s3connector ls [--prefix P] [--max-keys N]
  s3connector stat|exists|rm <key>
  s3connector cp <source> <destination> [--meta k=v ...]
  s3connector presign <key> [--expires-in N] [--operation getObject|putObject]
"""

PROFILE_OPT = typer.Option(None, "--profile", help="Config profile name.")
BASE_URL_OPT = typer.Option(None, "--base-url", help="Override base URL.")
JSON_OPT = typer.Option(False, "--json", help="Print raw JSON.")


def _client(profile: str | None, base_url: str | None):
    return make_client(load_config(), profile=profile, base_url_override=base_url)


def _metadata(pairs: list[str] | None) -> dict[str, str]:
    try:
        return parse_metadata_pairs(pairs)
    except ValueError as exc:
        console.err(str(exc))
        raise typer.Exit(code=2)


def _object_rows(data) -> list[dict]:
    if isinstance(data, dict):
        for key in ("objects", "files", "items", "contents"):
            if isinstance(data.get(key), list):
                data = data[key]
                break
    if not isinstance(data, list):
        return []
    return [item if isinstance(item, dict) else {"key": str(item)} for item in data]


def upload(
        file: Path = typer.Argument(..., help="Local file to upload."),
        path: str = typer.Option(..., "--path", help="Destination key in the bucket."),
        visibility: str | None = typer.Option(None, "--visibility", help="Object visibility."),
        meta: list[str] | None = typer.Option(None, "--meta", help="Metadata entry key=value (repeatable)."),
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
):
    """Upload a local file."""
    if visibility and visibility not in VISIBILITIES:
        console.err(f"Invalid visibility '{visibility}'. Use one of: {', '.join(VISIBILITIES)}.")
        raise typer.Exit(code=2)
    metadata = _metadata(meta)
    with _client(profile, base_url) as client:
        result = client.upload(str(file), path, metadata=metadata or None, visibility=visibility)
    emit(result, json_out=json_out, ok_msg=f"Uploaded {file.name} to {path}")


def download(
        key: str = typer.Argument(..., help="Object key."),
        out: str | None = typer.Option(None, "--out", "-o", help="Save content to this local path."),
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
):
    """Download an object, or just its download metadata without --out."""
    with _client(profile, base_url) as client:
        result = client.download(key, out)
    if isinstance(result, SavedDownload):
        emit(result, json_out=json_out, ok_msg=f"Saved {key} to {result.local_path} ({format_size(result.size)})")
        return
    emit(result, json_out=json_out)
    if not json_out and result.data is not None:
        console.print_json(result.data)


def remove(
        key: str = typer.Argument(..., help="Object key."),
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
):
    """Delete an object."""
    with _client(profile, base_url) as client:
        result = client.delete(key)
    emit(result, json_out=json_out, ok_msg=f"Deleted {key}")


def list_objects(
        prefix: str = typer.Option("", "--prefix", help="Only keys starting with this prefix."),
        max_keys: int = typer.Option(1000, "--max-keys", help="Max keys to return."),
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
):
    """List objects."""
    with _client(profile, base_url) as client:
        result = client.list_objects(prefix=prefix, max_keys=max_keys)
    if json_out or not result.success:
        emit(result, json_out=json_out)
        return

    rows = _object_rows(result.data)
    if not rows:
        console.info("No objects found.")
        return
    table = Table(title="Objects")
    table.add_column("key")
    table.add_column("size", justify="right")
    table.add_column("last_modified")
    for item in rows:
        table.add_row(
            str(item.get("key") or item.get("name") or "-"),
            format_size(item.get("size")),
            format_list_timestamp(item.get("last_modified")),
        )
    console.print(table)


def stat(
        key: str = typer.Argument(..., help="Object key."),
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
):
    """Show object metadata."""
    with _client(profile, base_url) as client:
        result = client.metadata(key)
    emit(result, json_out=json_out)
    if not json_out:
        console.print_json(result.data)


def exists(
        key: str = typer.Argument(..., help="Object key."),
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
):
    """Check whether an object exists."""
    with _client(profile, base_url) as client:
        result = client.exists(key)
    if json_out or not result.success:
        emit(result, json_out=json_out)
        return
    found = result.data.get("exists") if isinstance(result.data, dict) else result.data
    if found:
        console.ok(f"{key} exists")
    else:
        console.warn(f"{key} not found")
        raise typer.Exit(code=1)


def copy(
        source: str = typer.Argument(..., help="Source key."),
        destination: str = typer.Argument(..., help="Destination key."),
        meta: list[str] | None = typer.Option(None, "--meta", help="Metadata entry key=value (repeatable)."),
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
):
    """Copy an object to a new key."""
    metadata = _metadata(meta)
    with _client(profile, base_url) as client:
        result = client.copy(source, destination, metadata=metadata or None)
    emit(result, json_out=json_out, ok_msg=f"Copied {source} to {destination}")


def presign(
        key: str = typer.Argument(..., help="Object key."),
        expires_in: int | None = typer.Option(None, "--expires-in", help="Expiration in seconds."),
        operation: str = typer.Option("getObject", "--operation", help="getObject or putObject."),
        profile: str | None = PROFILE_OPT,
        base_url: str | None = BASE_URL_OPT,
        json_out: bool = JSON_OPT,
):
    """Generate a presigned URL."""
    with _client(profile, base_url) as client:
        result = client.presigned_url(key, expires_in=expires_in, operation=operation)
    if json_out or not result.success:
        emit(result, json_out=json_out)
        return
    url = result.data.get("url") if isinstance(result.data, dict) else result.data
    console.print(str(url) if url else result.data)
