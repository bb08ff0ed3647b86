"""
Low-level access to the MediaWiki API of a wiki through an
:py:class:`httpx.Client` session.

Only read-only actions are allowed and every call is a single HTTP GET
request, failed requests are not repeated.
"""

import argparse
import logging
import time
from typing import Any, Self, cast

import httpx

from wir.utils import DEFAULT_USER_AGENT, HTTPXClient

logger = logging.getLogger(__name__)

__all__ = [
    "Connection",
    "APIWrongAction",
    "APIJsonError",
    "APIError",
    "APIExpandResultFailed",
]

DEFAULT_API_URL = "https://mdwiki.org/w/api.php"
DEFAULT_TIMEOUT = 15

API_ACTIONS = {
    "help",
    "opensearch",
    "paraminfo",
    "parse",
    "query",
}


class Connection:
    """
    Read-only connection to the ``api.php`` entry point of a wiki.

    :param str api_url: URL of the wiki's ``api.php``
    :param httpx.Client session: session created by :py:meth:`make_session`
    :param float timeout:
        maximum duration of each request in seconds, including the download
        of the response body
    """

    def __init__(
        self,
        api_url: str,
        session: httpx.Client,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_url = api_url
        self.session = session
        self.timeout = timeout

    @staticmethod
    def make_session(
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> httpx.Client:
        """
        Creates the HTTP session. Failed requests are never retried.

        :param str user_agent: value of the ``User-Agent`` header
        :param float timeout: default timeout of the session in seconds
        """
        return HTTPXClient(headers={"User-Agent": user_agent}, timeout=timeout, retries=0)

    @staticmethod
    def set_argparser(argparser: argparse.ArgumentParser) -> None:
        """
        Adds the arguments used by :py:meth:`from_argparser`, see also the
        :py:mod:`wir.config` module.
        """
        import wir.config

        group = argparser.add_argument_group(title="Connection parameters")
        group.add_argument(
            "--api-url",
            metavar="URL",
            default=DEFAULT_API_URL,
            help="the URL to the wiki's api.php (default: %(default)s)",
        )
        group.add_argument(
            "--connection-timeout",
            metavar="SECONDS",
            default=DEFAULT_TIMEOUT,
            type=wir.config.argtype_positive_float,
            help="maximum duration of each request in seconds (default: %(default)s)",
        )
        group.add_argument(
            "--user-agent",
            default=DEFAULT_USER_AGENT,
            help="value of the User-Agent header (default: %(default)s)",
        )

    @classmethod
    def from_argparser(cls, args: argparse.Namespace) -> Self:
        session = cls.make_session(
            user_agent=args.user_agent, timeout=args.connection_timeout
        )
        return cls(args.api_url, session=session, timeout=args.connection_timeout)

    def request(
        self, method: str, url: str | httpx.URL, **kwargs: Any
    ) -> httpx.Response:
        """
        Sends a request using the session of the connection, so ``url`` should
        lead to the same site. The arguments are passed to
        :py:meth:`httpx.Client.stream`.

        The whole request, including reading of the response body, must finish
        within ``self.timeout`` seconds. The body is streamed and the deadline
        is checked after each received chunk, so a server sending the response
        slowly does not extend the request beyond the deadline.

        Exceptions of :py:mod:`httpx` are not translated, notably
        :py:exc:`httpx.TimeoutException` and :py:exc:`httpx.HTTPStatusError`
        (for 4XX and 5XX responses) should be handled by the caller.
        """
        deadline = time.monotonic() + self.timeout
        with self.session.stream(method, url, timeout=self.timeout, **kwargs) as response:
            # raise HTTPStatusError for bad requests (4XX client errors and 5XX server errors)
            response.raise_for_status()

            chunks = []
            for chunk in response.iter_raw():
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout(
                        f"the request did not finish within {self.timeout} seconds",
                        request=response.request,
                    )
                chunks.append(chunk)

        # the raw (possibly compressed) body is decoded by the new response
        return httpx.Response(
            response.status_code,
            headers=response.headers,
            content=b"".join(chunks),
            request=response.request,
        )

    def call_api(
        self,
        params: dict[str, Any] | None = None,
        *,
        expand_result: bool = True,
        check_warnings: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Sends a GET request to ``api.php`` and returns the decoded response.

        The API parameters are given either as the ``params`` dict or as
        keyword arguments, but not both. The ``action`` defaults to ``"help"``
        like in the API itself and ``format=json`` is always added.

        :param params: dictionary of API parameters, it is not modified
        :param expand_result:
            return only the member named after the action (e.g. ``query``)
            instead of the whole response
        :param check_warnings: log the API warnings contained in the response
        :param kwargs: API parameters passed as keyword arguments
        :raises APIWrongAction: for actions which are not read-only
        :raises APIJsonError: when the response is not a JSON object
        :raises APIError: when the response contains an error
        :raises APIExpandResultFailed:
            when ``expand_result`` is set and the response has no member
            named after the action
        """
        if params is None:
            params = kwargs
        elif not isinstance(params, dict):
            raise ValueError("params must be dict or None")
        elif kwargs and params:
            raise ValueError(
                "specifying 'params' and 'kwargs' at the same time is not supported"
            )

        params = dict(params, format="json")
        action = params.setdefault("action", "help")
        if action not in API_ACTIONS:
            raise APIWrongAction(action, API_ACTIONS)
        if action == "help":
            # the help text is returned as plain HTML unless wrapped
            params["wrap"] = "1"

        response = self.request("GET", self.api_url, params=params)
        try:
            result = response.json()
        except ValueError:
            result = None
        if not isinstance(result, dict):
            raise APIJsonError(
                "Failed to decode the response of {} as a JSON object, "
                "check that the API URL is correct.".format(self.api_url)
            )

        if "error" in result:
            raise APIError(params, result["error"])
        if check_warnings and "warnings" in result:
            lines = ["API warning(s) for query {}:".format(params)]
            for module, warning in result["warnings"].items():
                lines.append("* {}: {}".format(module, warning.get("*", warning)))
            logger.warning("\n".join(lines))

        if not expand_result:
            return result
        if action not in result:
            raise APIExpandResultFailed(f"the response has no '{action}' member")
        return cast(dict[str, Any], result[action])

    def get_hostname(self) -> str:
        """
        :returns: the hostname part of `self.api_url`
        """
        return httpx.URL(self.api_url).host

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()


class APIWrongAction(Exception):
    """Raised by :py:meth:`Connection.call_api` for an unsupported action."""

    def __init__(self, action: str, available: set[str]):
        super().__init__(f"{action} (supported actions: {', '.join(sorted(available))})")
        self.action = action


class APIJsonError(Exception):
    """Raised when the response is not a JSON object."""


class APIError(Exception):
    """
    Raised when the response contains the ``error`` member.

    :ivar params: the parameters of the failed call
    :ivar server_response: the content of the ``error`` member
    """

    def __init__(self, params: dict[str, Any], server_response: dict[str, Any]):
        super().__init__(params, server_response)
        self.params = params
        self.server_response = server_response

    def __str__(self) -> str:
        code = self.server_response.get("code", "unknown")
        info = self.server_response.get("info", "")
        return f"API error '{code}': {info} (query parameters: {self.params})"


class APIExpandResultFailed(Exception):
    """Raised when the response lacks the member named after the action."""
