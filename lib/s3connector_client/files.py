from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol


@dataclass(frozen=True)
class FilePart:
    field: str
    filename: str
    content: bytes
    content_type: str | None = None

    def as_httpx(self) -> tuple[str, tuple]:
        if self.content_type:
            return self.field, (self.filename, self.content, self.content_type)
        return self.field, (self.filename, self.content)


class LocalFileStore(Protocol):
    def read_bytes(self, ref: str | os.PathLike) -> bytes: ...

    def write_bytes(self, path: str | os.PathLike, data: bytes) -> None: ...


class DiskFileStore:
    """Local filesystem store; relative paths resolve against ``root``."""

    def __init__(self, root: str | os.PathLike | None = None):
        self.root = Path(root) if root is not None else None

    def _resolve(self, ref: str | os.PathLike) -> Path:
        path = Path(ref).expanduser()
        if self.root is not None and not path.is_absolute():
            path = self.root / path
        return path

    def read_bytes(self, ref: str | os.PathLike) -> bytes:
        path = self._resolve(ref)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return path.read_bytes()

    def write_bytes(self, path: str | os.PathLike, data: bytes) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)


FileSource = Any


def guess_content_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


def resolve_file_part(
        field: str,
        source: FileSource,
        store: LocalFileStore,
        *,
        default_name: str | None = None,
) -> FilePart:
    """Dereference a caller-supplied file reference into raw bytes plus a filename.

    Accepted sources:
      * ``FilePart``: passed through;
      * ``(filename, bytes)``: passed through unchanged;
      * ``str`` / ``os.PathLike``: read via ``store``, named by its basename;
      * binary file object: read, named by the basename of ``.name``;
      * ``bytes``: named ``default_name``.
    """
    if isinstance(source, FilePart):
        return source
    if isinstance(source, tuple):
        if len(source) != 2 or not isinstance(source[1], (bytes, bytearray)):
            raise TypeError("file tuple must be (filename, bytes)")
        return FilePart(field=field, filename=str(source[0]), content=bytes(source[1]))
    if isinstance(source, (bytes, bytearray)):
        return FilePart(field=field, filename=default_name or field, content=bytes(source))
    if isinstance(source, (str, os.PathLike)):
        content = store.read_bytes(source)
        filename = os.path.basename(os.fspath(source))
        return FilePart(field=field, filename=filename, content=content, content_type=guess_content_type(filename))
    read = getattr(source, "read", None)
    if callable(read):
        content = read()
        if isinstance(content, str):
            raise TypeError("file object must be opened in binary mode")
        name = getattr(source, "name", None)
        filename = os.path.basename(str(name)) if isinstance(name, (str, os.PathLike)) and name else None
        return FilePart(field=field, filename=filename or default_name or field, content=bytes(content))
    raise TypeError(f"unsupported file source: {type(source).__name__}")
