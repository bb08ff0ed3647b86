import ssl
from typing import Any

import httpx
import truststore

from wir import __url__, __version__

__all__ = ["DEFAULT_USER_AGENT", "HTTPXClient"]

DEFAULT_USER_AGENT = f"wiki-image-report/{__version__} ({__url__})"


def _get_headers(
    headers: dict[str, str] | None = None,
) -> dict[str, str]:
    if headers is None:
        headers = {}

    # set default user agent for wiki-image-report
    headers.setdefault("User-Agent", DEFAULT_USER_AGENT)

    return headers


def _get_ssl_context() -> ssl.SSLContext:
    # use the system certificate store via truststore and allow only TLS1.2
    # (and newer if supported by the used openssl version)
    ssl_context: ssl.SSLContext = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def HTTPXClient(
    *,
    headers: dict[str, str] | None = None,
    timeout: float | httpx.Timeout = 15,
    retries: int = 0,
    transport: httpx.BaseTransport | None = None,
    **kwargs: Any,
) -> httpx.Client:
    """
    Creates an :py:class:`httpx.Client` instance with the default parameters of
    the project.

    Requests are never retried by default: every article is attempted exactly
    once per run and a timeout is reported instead.
    """

    if isinstance(timeout, (int, float)):
        # disable timeout for waiting for a connection from the pool
        timeout = httpx.Timeout(timeout, pool=None)

    if transport is None:
        transport = httpx.HTTPTransport(retries=retries)

    return httpx.Client(
        transport=transport,
        verify=_get_ssl_context(),
        headers=_get_headers(headers),
        timeout=timeout,
        **kwargs,
    )
