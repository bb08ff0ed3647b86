"""
Fetching of the latest revision content of single pages.

The outcome of each fetch is reported as one of the :py:class:`Found`,
:py:class:`NotFound` or :py:class:`TimedOut` results. Errors of the
connection layer never propagate from :py:func:`fetch_wikitext`, they are
logged and reported as :py:class:`NotFound`.
"""

import logging
from dataclasses import dataclass
from typing import Any, TypeAlias

import httpx

from wir.client.connection import (
    APIError,
    APIExpandResultFailed,
    APIJsonError,
    Connection,
)

__all__ = [
    "Found",
    "NotFound",
    "TimedOut",
    "FetchResult",
    "fetch_wikitext",
    "extract_wikitext",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Found:
    wikitext: str


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class TimedOut:
    pass


FetchResult: TypeAlias = Found | NotFound | TimedOut


def extract_wikitext(query: dict[str, Any]) -> str | None:
    """
    Extracts the content of the latest revision from the ``query`` part of the
    response to a ``prop=revisions`` query.

    Both the content of the main slot (MediaWiki 1.32 and newer) and the
    legacy format are supported.

    :param query: the ``query`` member of the API response
    :returns: the wikitext of the first page with revisions, or ``None`` if
              there is no such page
    """
    for page in query.get("pages", {}).values():
        revisions = page.get("revisions")
        if not revisions:
            continue
        revision = revisions[0]
        main = revision.get("slots", {}).get("main", {})
        if main.get("*"):
            return main["*"]
        if revision.get("*"):
            return revision["*"]
    return None


def fetch_wikitext(connection: Connection, title: str) -> FetchResult:
    """
    Fetches the wikitext of the latest revision of a page.

    :param connection: a :py:class:`wir.client.connection.Connection` object
    :param str title: title of the page
    :returns: :py:class:`Found` with the wikitext, :py:class:`TimedOut` when
              the request did not finish in time, :py:class:`NotFound` when
              the page does not exist or the request failed otherwise
    """
    try:
        query = connection.call_api(
            action="query", prop="revisions", rvprop="content", titles=title
        )
    except httpx.TimeoutException:
        logger.warning('Error fetching "{}": Request timed out'.format(title))
        return TimedOut()
    except httpx.HTTPStatusError as e:
        logger.error('Error fetching "{}": HTTP error! status: {}'.format(title, e.response.status_code))
        return NotFound()
    except httpx.HTTPError as e:
        logger.error('Error fetching "{}": {}'.format(title, e))
        return NotFound()
    except (APIJsonError, APIError, APIExpandResultFailed) as e:
        logger.error('Error fetching "{}": {}'.format(title, str(e) or type(e).__name__))
        return NotFound()

    wikitext = extract_wikitext(query)
    if wikitext is None:
        return NotFound()
    return Found(wikitext)
