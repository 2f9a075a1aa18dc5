from __future__ import annotations

import pytest
import typer

from s3connector_cli import config
from s3connector_cli.http import client_config, make_client


def test_make_client_uses_profile_config(tmp_path, monkeypatch) -> None:
    def _config_dir(_: str) -> str:
        return str(tmp_path)

    monkeypatch.setattr(config, "user_config_dir", _config_dir)
    monkeypatch.delenv(config.ENV_API_KEY, raising=False)
    monkeypatch.delenv(config.ENV_BASE_URL, raising=False)
    cfg_path = tmp_path / "config.toml"
    cfg_path.write_text(
        '\n'.join(
            [
                'base_url = "http://default.test"',
                'api_key = "default-key-000000"',
                "",
                "[profiles.prod]",
                'base_url = "http://prod.test"',
                'api_key = "prod-key-00000000"',
                "",
            ]
        ),
        encoding="utf-8",
    )

    cfg = config.load_config()
    captured = {}

    class _FakeClient:
        def __init__(self, client_cfg):
            captured["base_url"] = client_cfg.base_url
            captured["api_key"] = client_cfg.api_key

    monkeypatch.setattr("s3connector_cli.http.S3ConnectorClient", _FakeClient)

    make_client(cfg, profile="prod", base_url_override=None)

    assert captured["base_url"] == "http://prod.test"
    assert captured["api_key"] == "prod-key-00000000"


def test_make_client_normalizes_base_url_override(monkeypatch) -> None:
    cfg = config.default_config()
    cfg.api_key = "sk_test_0123456789"
    captured = {}

    class _FakeClient:
        def __init__(self, client_cfg):
            captured["base_url"] = client_cfg.base_url

    monkeypatch.setattr("s3connector_cli.http.S3ConnectorClient", _FakeClient)

    make_client(cfg, profile=None, base_url_override="example.com/api/")

    assert captured["base_url"] == "https://example.com/api"
    assert cfg.base_url == "http://localhost:8000/api"


def test_make_client_exits_on_missing_api_key() -> None:
    cfg = config.default_config()
    with pytest.raises(typer.Exit) as exc_info:
        make_client(cfg, profile=None, base_url_override=None)
    assert exc_info.value.exit_code == 2


def test_client_config_carries_all_settings() -> None:
    cfg = config.default_config()
    cfg.api_key = "sk_test_0123456789"
    cfg.default_visibility = "public-read"
    cfg.retry.delay = 250
    cfg.cache.enabled = True

    client_cfg = client_config(cfg)

    assert client_cfg.default_visibility == "public-read"
    assert client_cfg.retry.delay_ms == 250
    assert client_cfg.cache.enabled is True
    assert client_cfg.presigned_expiration_s == 3600
