from __future__ import annotations

import json

from typer.testing import CliRunner

from s3connector_client import ConnectionReport, Failure, PartialFailure, SavedDownload, Success
from s3connector_cli import main
from s3connector_cli.commands import objects_cmd, system_cmd

runner = CliRunner()


class _FakeClient:
    def __init__(self):
        self.calls: list[tuple] = []
        self.health_result = Success(data={"bucket_status": "accessible"}, message="healthy", status_code=200)

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        return None

    def upload(self, file, path, *, metadata=None, visibility=None, filename=None):  # noqa: ANN001
        self.calls.append(("upload", file, path, metadata, visibility))
        return Success(data={"key": path}, message="uploaded", status_code=200)

    def download(self, key, local_path=None):  # noqa: ANN001
        self.calls.append(("download", key, local_path))
        if key == "broken.txt":
            return PartialFailure(
                error="Download failed",
                metadata=Success(data={"key": key}),
                local_path=local_path,
                status_code=502,
            )
        if local_path:
            return SavedDownload(local_path=local_path, size=4, data={"key": key}, message="saved")
        return Success(data={"key": key, "url": "https://cdn.test/x"}, message="ready")

    def delete(self, key):  # noqa: ANN001
        self.calls.append(("delete", key))
        if key == "missing.txt":
            return Failure(error="not found", status_code=404, raw_response={"message": "not found"})
        return Success(message="deleted")

    def list_objects(self, prefix="", max_keys=1000):  # noqa: ANN001
        self.calls.append(("list", prefix, max_keys))
        return Success(
            data={"objects": [{"key": "docs/a.txt", "size": 2048, "last_modified": "2024-05-01T08:00:00Z"}]}
        )

    def metadata(self, key):  # noqa: ANN001
        return Success(data={"key": key, "size": 1})

    def exists(self, key):  # noqa: ANN001
        return Success(data={"exists": key == "here.txt"})

    def copy(self, source_key, destination_key, *, metadata=None):  # noqa: ANN001
        self.calls.append(("copy", source_key, destination_key, metadata))
        return Success(message="copied")

    def presigned_url(self, key, *, expires_in=None, operation="getObject"):  # noqa: ANN001
        self.calls.append(("presign", key, expires_in, operation))
        return Success(data={"url": f"https://signed.test/{key}"})

    def health(self):
        return self.health_result

    def config_check(self):
        return Success(data={"configured": True})

    def bucket_info(self):
        return Success(data={"bucket": "media"})

    def cleanup_temp(self):
        return Failure(error="connection refused", status_code=0)

    def service_info(self):
        return {
            "service_name": "S3 Connector Service",
            "version": "1.0.0",
            "base_url": "http://s3.test/api",
            "api_key_prefix": "sk_live_ab...",
            "timeout": 30,
            "logging_enabled": True,
            "supported_operations": ["upload", "download"],
        }

    def validate_api_key(self) -> bool:
        return True

    def test_connection(self) -> ConnectionReport:
        if isinstance(self.health_result, Success):
            return ConnectionReport(
                connected=True,
                message="Successfully connected to S3 Connector",
                base_url="http://s3.test/api",
                api_key_preview="sk_live_ab...",
                health_status="accessible",
            )
        return ConnectionReport(
            connected=False,
            message="Failed to connect to S3 Connector",
            base_url="http://s3.test/api",
            api_key_preview="sk_live_ab...",
            error=self.health_result.error,
        )


def _install(monkeypatch) -> _FakeClient:
    client = _FakeClient()

    def _make_client(cfg, *, profile, base_url_override):  # noqa: ANN001
        return client

    monkeypatch.setattr(objects_cmd, "make_client", _make_client)
    monkeypatch.setattr(system_cmd, "make_client", _make_client)
    return client


def test_help_lists_storage_and_system_commands() -> None:
    result = runner.invoke(main._build_app(), ["--help"])
    assert result.exit_code == 0
    for name in ("upload", "download", "ls", "presign", "health", "test", "settings"):
        assert name in result.output


def test_upload_passes_metadata_and_visibility(monkeypatch, tmp_path) -> None:
    client = _install(monkeypatch)
    src = tmp_path / "a.txt"
    src.write_text("hi", encoding="utf-8")

    result = runner.invoke(
        main.app,
        ["upload", str(src), "--path", "docs/a.txt", "--visibility", "public-read", "--meta", "author=sam"],
    )

    assert result.exit_code == 0, result.output
    assert client.calls == [("upload", str(src), "docs/a.txt", {"author": "sam"}, "public-read")]
    assert "Uploaded a.txt to docs/a.txt" in result.output


def test_upload_rejects_unknown_visibility(monkeypatch, tmp_path) -> None:
    client = _install(monkeypatch)
    result = runner.invoke(main.app, ["upload", str(tmp_path / "a.txt"), "--path", "a", "--visibility", "world"])
    assert result.exit_code == 2
    assert client.calls == []


def test_upload_rejects_malformed_metadata(monkeypatch, tmp_path) -> None:
    _install(monkeypatch)
    result = runner.invoke(main.app, ["upload", str(tmp_path / "a.txt"), "--path", "a", "--meta", "oops"])
    assert result.exit_code == 2
    assert "key=value" in result.output


def test_download_to_local_path(monkeypatch) -> None:
    client = _install(monkeypatch)
    result = runner.invoke(main.app, ["download", "docs/a.txt", "--out", "out/a.txt"])
    assert result.exit_code == 0, result.output
    assert client.calls == [("download", "docs/a.txt", "out/a.txt")]
    assert "Saved docs/a.txt to out/a.txt" in result.output


def test_download_partial_failure_exits_nonzero(monkeypatch) -> None:
    _install(monkeypatch)
    result = runner.invoke(main.app, ["download", "broken.txt", "--out", "b.txt", "--json"])
    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["success"] is False
    assert payload["saved"] is False
    assert payload["status_code"] == 502


def test_rm_failure_reports_status(monkeypatch) -> None:
    _install(monkeypatch)
    result = runner.invoke(main.app, ["rm", "missing.txt"])
    assert result.exit_code == 1
    assert "not found (HTTP 404)" in result.output


def test_ls_renders_table(monkeypatch) -> None:
    client = _install(monkeypatch)
    result = runner.invoke(main.app, ["ls", "--prefix", "docs/", "--max-keys", "10"])
    assert result.exit_code == 0, result.output
    assert client.calls == [("list", "docs/", 10)]
    assert "docs/a.txt" in result.output
    assert "2.0 KB" in result.output


def test_exists_reports_missing_with_exit_code(monkeypatch) -> None:
    _install(monkeypatch)
    assert runner.invoke(main.app, ["exists", "here.txt"]).exit_code == 0
    assert runner.invoke(main.app, ["exists", "gone.txt"]).exit_code == 1


def test_cp_and_presign(monkeypatch) -> None:
    client = _install(monkeypatch)
    assert runner.invoke(main.app, ["cp", "a.txt", "b.txt", "--meta", "tag=v2"]).exit_code == 0
    result = runner.invoke(main.app, ["presign", "a.txt", "--expires-in", "60"])
    assert result.exit_code == 0, result.output
    assert "https://signed.test/a.txt" in result.output
    assert client.calls == [
        ("copy", "a.txt", "b.txt", {"tag": "v2"}),
        ("presign", "a.txt", 60, "getObject"),
    ]


def test_health_json_output(monkeypatch) -> None:
    _install(monkeypatch)
    result = runner.invoke(main.app, ["health", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["success"] is True
    assert payload["data"] == {"bucket_status": "accessible"}


def test_cleanup_temp_transport_failure(monkeypatch) -> None:
    _install(monkeypatch)
    result = runner.invoke(main.app, ["cleanup-temp"])
    assert result.exit_code == 1
    assert "connection refused" in result.output
    assert "HTTP" not in result.output


def test_self_test_success(monkeypatch) -> None:
    _install(monkeypatch)
    result = runner.invoke(main.app, ["test"])
    assert result.exit_code == 0, result.output
    assert "Successfully connected to S3 Connector" in result.output
    assert "Health check passed" in result.output
    assert "sk_live_ab..." in result.output


def test_self_test_failure_json(monkeypatch) -> None:
    client = _install(monkeypatch)
    client.health_result = Failure(error="connection refused", status_code=0)
    result = runner.invoke(main.app, ["test", "--json"])
    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["api_key_valid"] is True
    assert payload["connection"]["success"] is False
    assert payload["connection"]["api_key"] == "sk_live_ab..."
    assert payload["health"]["status_code"] == 0


def test_info_lists_operations(monkeypatch) -> None:
    _install(monkeypatch)
    result = runner.invoke(main.app, ["info"])
    assert result.exit_code == 0, result.output
    assert "supported_operations: upload, download" in result.output
