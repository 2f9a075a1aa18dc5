from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import httpx

from .errors import NetworkError

USER_AGENT = "s3connector-client/1.0.0"


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes = b""
    json: Any = None


class Transport:
    """Thin wrapper over ``httpx.Client``.

    Never raises for HTTP error statuses; only transport-level failures
    (DNS, refused connection, timeout, protocol errors) raise ``NetworkError``.
    The body is streamed so the timeout holds even for a server that trickles
    bytes slowly.
    """

    def __init__(self, *, transport: httpx.BaseTransport | None = None):
        self._client = httpx.Client(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def request(
            self,
            method: str,
            url: str,
            *,
            headers: Mapping[str, str],
            timeout: float,
            json_body: Any | None = None,
            params: Mapping[str, Any] | None = None,
            data: Mapping[str, Any] | None = None,
            files: Sequence[tuple[str, tuple]] | None = None,
    ) -> RawResponse:
        """Send one request; ``timeout`` bounds the whole call, body included."""
        deadline = time.monotonic() + timeout
        try:
            req = self._client.build_request(
                method,
                url,
                headers=dict(headers),
                json=json_body,
                params=params,
                data=data,
                files=files,
                timeout=httpx.Timeout(timeout),
            )
            r = self._client.send(req, stream=True)
            try:
                chunks: list[bytes] = []
                _check_deadline(deadline, timeout)
                for chunk in r.iter_bytes():
                    chunks.append(chunk)
                    _check_deadline(deadline, timeout)
            finally:
                r.close()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(str(e) or e.__class__.__name__) from e

        content = b"".join(chunks)
        parsed: Any = None
        if content:
            try:
                parsed = json.loads(content)
            except ValueError:
                parsed = None

        return RawResponse(
            status_code=r.status_code,
            headers=r.headers,
            content=content,
            json=parsed,
        )


def _check_deadline(deadline: float, timeout: float) -> None:
    if time.monotonic() >= deadline:
        raise NetworkError(f"Request timed out after {timeout}s")
