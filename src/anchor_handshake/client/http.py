from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from ..errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    status_code: int
    text: str
    body: Any = None  # parsed JSON, None when the body is not JSON

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def details(self) -> Any:
        """Raw Verifier payload for error reporting."""
        return self.body if self.body is not None else self.text


class HttpTransport:
    """Blocking request/response transport over a shared ``requests.Session``.

    Non-2xx responses are returned to the caller. Only network failures and
    timeouts raise, as ``TransportError``. Nothing is retried here.
    """

    def __init__(self, timeout: float = 30.0, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        request_headers = {"Accept": "application/json"}
        if json is not None:
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})

        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=request_headers,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"{method} {url} timed out") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None
        logger.debug(f"{method} {url} -> {resp.status_code}")
        return HttpResponse(status_code=resp.status_code, text=resp.text, body=body)

    def get(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        self._session.close()
