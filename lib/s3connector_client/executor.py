from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Sequence

from .config_types import ClientConfig
from .envelope import DOWNLOAD_FAILED, Content, ContentResult, Envelope, Failure, classify
from .errors import NetworkError
from .files import FilePart
from .transport import Transport

logger = logging.getLogger(__name__)

METHODS = {"get", "post", "delete"}

# (method, url, status code or transport error text)
RequestObserver = Callable[[str, str, "int | str"], None]


def log_request(method: str, url: str, outcome: int | str) -> None:
    """Default request observer."""
    if isinstance(outcome, int):
        logger.info(
            "S3 Connector API request %s %s -> %s",
            method.upper(),
            url,
            outcome,
            extra={"method": method, "url": url, "status": outcome},
        )
    else:
        logger.error(
            "S3 Connector API error %s %s: %s",
            method.upper(),
            url,
            outcome,
            extra={"method": method, "url": url, "error": outcome},
        )


def join_url(base_url: str, path: str) -> str:
    if base_url.endswith("/"):
        base_url = base_url[:-1]
    if path.startswith("/"):
        path = path[1:]
    return f"{base_url}/{path}"


def _query_value(value: Any) -> Any:
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False)
    return value


def form_fields(fields: Mapping[str, Any], prefix: str | None = None) -> dict[str, str]:
    """Flatten a mapping into multipart form fields (``metadata[author]`` style)."""
    out: dict[str, str] = {}
    for key, value in fields.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            out.update(form_fields(value, name))
        elif isinstance(value, (list, tuple)):
            out.update(form_fields({str(i): item for i, item in enumerate(value)}, name))
        elif isinstance(value, bool):
            out[name] = "1" if value else "0"
        else:
            out[name] = str(value)
    return out


class RequestExecutor:
    def __init__(
            self,
            cfg: ClientConfig,
            transport: Transport,
            *,
            observer: RequestObserver | None = None,
    ):
        self.config = cfg
        self._t = transport
        self._observer = observer or log_request

    def _headers(self, *, accept: str = "application/json", json_content: bool = True) -> dict[str, str]:
        headers = {
            "X-API-Key": self.config.api_key,
            "Accept": accept,
        }
        if json_content:
            headers["Content-Type"] = "application/json"
        return headers

    def _notify(self, method: str, url: str, outcome: int | str) -> None:
        if not self.config.logging_enabled:
            return
        try:
            self._observer(method, url, outcome)
        except Exception:
            logger.debug("request observer failed for %s %s", method, url, exc_info=True)

    @staticmethod
    def _check_method(method: str) -> str:
        m = (method or "").lower()
        if m not in METHODS:
            raise ValueError(f"unsupported method: {method!r}")
        return m

    def execute(
            self,
            method: str,
            path: str,
            body: Mapping[str, Any] | None = None,
            headers: Mapping[str, str] | None = None,
    ) -> Envelope:
        m = self._check_method(method)
        if not path:
            raise ValueError("endpoint path cannot be empty")
        url = join_url(self.config.base_url, path)
        merged = {**self._headers(), **(headers or {})}
        payload = dict(body or {})

        json_body = None
        params = None
        if payload:
            if m == "get":
                params = {k: _query_value(v) for k, v in payload.items()}
            else:
                json_body = payload

        try:
            r = self._t.request(
                m.upper(),
                url,
                headers=merged,
                timeout=self.config.timeout_s,
                json_body=json_body,
                params=params,
            )
        except NetworkError as exc:
            self._notify(m, url, str(exc))
            return Failure(error=str(exc), status_code=0)

        self._notify(m, url, r.status_code)
        return classify(r.status_code, r.json)

    def execute_with_files(
            self,
            method: str,
            path: str,
            fields: Mapping[str, Any] | None = None,
            files: Sequence[FilePart] = (),
    ) -> Envelope:
        m = self._check_method(method)
        if not path:
            raise ValueError("endpoint path cannot be empty")
        url = join_url(self.config.base_url, path)

        try:
            r = self._t.request(
                m.upper(),
                url,
                headers=self._headers(json_content=False),
                timeout=self.config.timeout_s,
                data=form_fields(fields or {}),
                files=[part.as_httpx() for part in files],
            )
        except NetworkError as exc:
            self._notify(m, url, str(exc))
            return Failure(error=str(exc), status_code=0)

        self._notify(m, url, r.status_code)
        return classify(r.status_code, r.json)

    def fetch_raw_content(self, key: str) -> ContentResult:
        """Fetch object bytes from the download endpoint without JSON decoding."""
        url = join_url(self.config.base_url, "s3/download")
        try:
            r = self._t.request(
                "POST",
                url,
                headers=self._headers(accept="*/*"),
                timeout=self.config.timeout_s,
                json_body={"key": key},
            )
        except NetworkError as exc:
            self._notify("post", url, str(exc))
            return Failure(error=str(exc), status_code=0)

        self._notify("post", url, r.status_code)
        if not 200 <= r.status_code < 300:
            return Failure(error=DOWNLOAD_FAILED, status_code=r.status_code, raw_response=r.json)

        length_header = r.headers.get("Content-Length")
        try:
            content_length = int(length_header) if length_header is not None else len(r.content)
        except ValueError:
            content_length = len(r.content)
        return Content(
            data=r.content,
            content_type=r.headers.get("Content-Type"),
            content_length=content_length,
            status_code=r.status_code,
        )

    def close(self) -> None:
        self._t.close()
