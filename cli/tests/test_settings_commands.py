from __future__ import annotations

from typer.testing import CliRunner

from s3connector_cli import config, main

runner = CliRunner()


def _isolate(tmp_path, monkeypatch) -> None:
    def _config_dir(_: str) -> str:
        return str(tmp_path)

    monkeypatch.setattr(config, "user_config_dir", _config_dir)
    monkeypatch.delenv(config.ENV_API_KEY, raising=False)
    monkeypatch.delenv(config.ENV_BASE_URL, raising=False)


def test_settings_group_available() -> None:
    result = runner.invoke(main._build_app(), ["settings", "--help"])
    assert result.exit_code == 0
    for name in ("init", "show", "get", "set"):
        assert name in result.output


def test_init_writes_config(tmp_path, monkeypatch) -> None:
    _isolate(tmp_path, monkeypatch)
    result = runner.invoke(
        main.app,
        ["settings", "init", "--base-url", "s3.example.test/api", "--api-key", "sk_init_0123456789"],
    )
    assert result.exit_code == 0, result.output
    cfg = config.load_config()
    assert cfg.base_url == "https://s3.example.test/api"
    assert cfg.api_key == "sk_init_0123456789"


def test_init_rejects_short_key(tmp_path, monkeypatch) -> None:
    _isolate(tmp_path, monkeypatch)
    result = runner.invoke(main.app, ["settings", "init", "--base-url", "http://x.test", "--api-key", "short"])
    assert result.exit_code == 2
    assert not (tmp_path / "config.toml").exists()


def test_set_and_get_mask_api_key(tmp_path, monkeypatch) -> None:
    _isolate(tmp_path, monkeypatch)
    result = runner.invoke(
        main.app,
        ["settings", "set", "--api-key", "sk_secret_0123456789", "--timeout", "75", "--no-logging"],
    )
    assert result.exit_code == 0, result.output

    cfg = config.load_config()
    assert cfg.timeout == 75
    assert cfg.enable_logging is False

    shown = runner.invoke(main.app, ["settings", "get", "api_key"])
    assert shown.exit_code == 0
    assert "sk_secret_..." in shown.output
    assert "sk_secret_0123456789" not in shown.output


def test_set_does_not_persist_env_overrides(tmp_path, monkeypatch) -> None:
    _isolate(tmp_path, monkeypatch)
    monkeypatch.setenv(config.ENV_API_KEY, "sk_from_env_0123456")
    result = runner.invoke(main.app, ["settings", "set", "--timeout", "12"])
    assert result.exit_code == 0, result.output
    assert "sk_from_env" not in (tmp_path / "config.toml").read_text(encoding="utf-8")


def test_get_unknown_setting(tmp_path, monkeypatch) -> None:
    _isolate(tmp_path, monkeypatch)
    result = runner.invoke(main.app, ["settings", "get", "colour"])
    assert result.exit_code == 2
