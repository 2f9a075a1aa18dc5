from __future__ import annotations

import typer

from .commands import objects_cmd, settings_cmd, system_cmd
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="s3connector",
        help="S3 Connector CLI\n\n" + objects_cmd.OBJECTS_USAGE,
        no_args_is_help=True,
    )

    app.add_typer(settings_cmd.app, name="settings")

    # Storage operations
    app.command("upload")(objects_cmd.upload)
    app.command("download")(objects_cmd.download)
    app.command("rm")(objects_cmd.remove)
    app.command("ls")(objects_cmd.list_objects)
    app.command("stat")(objects_cmd.stat)
    app.command("exists")(objects_cmd.exists)
    app.command("cp")(objects_cmd.copy)
    app.command("presign")(objects_cmd.presign)

    # System operations
    app.command("health")(system_cmd.health)
    app.command("config-check")(system_cmd.config_check)
    app.command("bucket-info")(system_cmd.bucket_info)
    app.command("cleanup-temp")(system_cmd.cleanup_temp)
    app.command("info")(system_cmd.info)
    app.command("test")(system_cmd.test_service)

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
