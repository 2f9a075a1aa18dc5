from __future__ import annotations

import os

import typer

from .. import console
from ..config import (
    VISIBILITIES,
    config_path,
    default_config,
    load_config,
    mask_secret,
    normalize_base_url,
    save_config,
)

app = typer.Typer(help="Manage local settings (config.toml in the user config dir).")

SETTING_KEYS = ("base_url", "api_key", "timeout", "enable_logging", "default_visibility",
                "default_presigned_expiration")


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        base_url: str = typer.Option(
            ...,
            "--base-url",
            prompt="API base URL",
            help="API base URL like http://localhost:8000/api",
        ),
        api_key: str = typer.Option(
            ...,
            "--api-key",
            prompt="API key",
            hide_input=True,
            help="S3 Connector API key.",
        ),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.base_url = normalize_base_url(base_url, warn=True)
    if not cfg.base_url:
        console.err("Base URL cannot be empty.")
        raise typer.Exit(code=2)
    cfg.api_key = api_key.strip()
    if len(cfg.api_key) < 10:
        console.err("API key must be at least 10 characters long.")
        raise typer.Exit(code=2)
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    console.console.print(
        f"base_url={cfg.base_url} api_key={mask_secret(cfg.api_key)} timeout={cfg.timeout} "
        f"enable_logging={cfg.enable_logging} default_visibility={cfg.default_visibility} "
        f"default_presigned_expiration={cfg.default_presigned_expiration}",
        markup=False,
    )


@app.command("get")
def get_setting(
        key: str = typer.Argument(..., help=f"Setting key ({', '.join(SETTING_KEYS)})."),
):
    cfg = load_config()
    k = key.strip().lower()
    if k not in SETTING_KEYS:
        console.err(f"Unknown setting: {key}")
        raise typer.Exit(code=2)
    value = getattr(cfg, k)
    if k == "api_key":
        value = mask_secret(value)
    console.console.print(str(value), markup=False)


@app.command("set")
def set_setting(
        base_url: str | None = typer.Option(None, "--base-url", help="Set API base URL."),
        api_key: str | None = typer.Option(None, "--api-key", help="Set API key."),
        timeout: int | None = typer.Option(None, "--timeout", help="Request timeout in seconds."),
        enable_logging: bool | None = typer.Option(None, "--logging/--no-logging", help="Log API requests."),
        default_visibility: str | None = typer.Option(None, "--default-visibility", help="Default upload visibility."),
        default_presigned_expiration: int | None = typer.Option(
            None, "--presigned-expiration", help="Default presigned URL expiration in seconds."
        ),
):
    # file values only; env overrides must not leak into config.toml
    cfg = load_config(use_env=False)
    if base_url is not None:
        cfg.base_url = normalize_base_url(base_url, warn=True)
    if api_key is not None:
        if len(api_key.strip()) < 10:
            console.err("API key must be at least 10 characters long.")
            raise typer.Exit(code=2)
        cfg.api_key = api_key.strip()
    if timeout is not None:
        if timeout <= 0:
            console.err("Timeout must be positive.")
            raise typer.Exit(code=2)
        cfg.timeout = timeout
    if enable_logging is not None:
        cfg.enable_logging = enable_logging
    if default_visibility is not None:
        if default_visibility not in VISIBILITIES:
            console.err(f"Invalid visibility. Use one of: {', '.join(VISIBILITIES)}.")
            raise typer.Exit(code=2)
        cfg.default_visibility = default_visibility
    if default_presigned_expiration is not None:
        cfg.default_presigned_expiration = default_presigned_expiration
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")
