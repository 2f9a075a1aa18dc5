from __future__ import annotations

from typing import Any

import typer

from . import console


def emit(result: Any, *, json_out: bool, ok_msg: str | None = None) -> None:
    """Print an envelope; exit 1 when the call failed."""
    if json_out:
        console.print_json(result.to_dict())
    if not result.success:
        if not json_out:
            status = getattr(result, "status_code", 0)
            suffix = f" (HTTP {status})" if status else ""
            console.err(f"{result.error}{suffix}")
        raise typer.Exit(code=1)
    if json_out:
        return
    message = ok_msg or getattr(result, "message", None)
    if message:
        console.ok(str(message))
