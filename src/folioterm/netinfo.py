"""Public IP lookup used by the ``whoami`` command."""

from __future__ import annotations

import asyncio
import json
import logging as py_logging
from collections.abc import Awaitable, Callable
from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from folioterm.errors import ErrorKind, ExitCode, TerminalError

logger = py_logging.getLogger(__name__)

HttpResponse = tuple[int, str]
AsyncIpLookup = Callable[[str], Awaitable[str]]


class HttpRequester(Protocol):
    def __call__(self, url: str, headers: dict[str, str], timeout: float) -> HttpResponse: ...


def _lookup_error(message: str, hint: str = "") -> TerminalError:
    return TerminalError(
        message,
        code=ExitCode.NETWORK_ERROR,
        hint=hint,
        kind=ErrorKind.NETWORK_FAILURE,
    )


def _timeout_error() -> TerminalError:
    return TerminalError(
        "IP lookup timed out.",
        code=ExitCode.NETWORK_ERROR,
        kind=ErrorKind.NETWORK_TIMEOUT,
    )


def _validate_lookup_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in {"https", "http"} or not parsed.netloc:
        raise TerminalError(
            f"Invalid IP lookup URL: {url}",
            code=ExitCode.VALIDATION_ERROR,
            hint="Use an absolute http(s) URL.",
            kind=ErrorKind.NETWORK_FAILURE,
        )


def _default_requester(url: str, headers: dict[str, str], timeout: float) -> HttpResponse:
    request = Request(url, headers=headers, method="GET")
    try:
        with urlopen(request, timeout=timeout) as response:  # nosec B310
            status = int(getattr(response, "status", response.getcode()))
            return status, response.read().decode("utf-8")
    except HTTPError as exc:
        payload = ""
        if exc.fp is not None:
            payload = exc.read().decode("utf-8", errors="replace")
        return exc.code, payload
    except TimeoutError as exc:
        raise _timeout_error() from exc
    except URLError as exc:
        if isinstance(exc.reason, TimeoutError):
            raise _timeout_error() from exc
        raise _lookup_error("IP lookup service unreachable.", str(exc.reason)) from exc


def fetch_public_ip(
    url: str,
    *,
    timeout: float = 10.0,
    requester: HttpRequester | None = None,
) -> str:
    _validate_lookup_url(url)
    do_request = requester or _default_requester
    status, payload = do_request(url, {"Accept": "application/json", "User-Agent": "folioterm"}, timeout)
    if status != 200:
        logger.warning("IP lookup returned status=%s", status)
        raise _lookup_error(f"IP lookup failed with HTTP {status}.")
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as exc:
        logger.error("IP lookup payload was not valid JSON")
        raise _lookup_error("IP lookup returned an invalid response.") from exc
    ip = parsed.get("ip") if isinstance(parsed, dict) else None
    if not isinstance(ip, str) or not ip.strip():
        raise _lookup_error("IP lookup response did not include an address.")
    return ip.strip()


async def fetch_public_ip_async(url: str, *, timeout: float = 10.0) -> str:
    return await asyncio.to_thread(fetch_public_ip, url, timeout=timeout)
