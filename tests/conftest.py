import http.server
import json
import logging
import re
import threading
import time
from typing import Iterator

import httpx
import pytest
import pytest_httpx

import wir.config
from wir.client import Connection

# set up the global logger
logging.basicConfig()
logging.getLogger().setLevel(logging.DEBUG)

API_URL = "http://wiki-image-report.localhost/api.php"


class MockWiki:
    """
    Pages served by the mocked ``api.php`` entry point.

    :ivar pages: mapping of titles to the wikitext of their latest revision
    :ivar timeouts: titles whose requests time out
    :ivar errors: mapping of titles to HTTP status codes of failed requests
    :ivar legacy: serve the revision content in the format before MediaWiki 1.32
    """

    def __init__(self):
        self.pages: dict[str, str] = {}
        self.timeouts: set[str] = set()
        self.errors: dict[str, int] = {}
        self.legacy = False
        # titles in the order of the requests
        self.requested: list[str] = []

    def page(self, pageid: int, title: str) -> dict:
        if title not in self.pages:
            return {"ns": 0, "title": title, "missing": ""}
        if self.legacy:
            revision = {"contentformat": "text/x-wiki", "contentmodel": "wikitext", "*": self.pages[title]}
        else:
            revision = {
                "slots": {
                    "main": {
                        "contentmodel": "wikitext",
                        "contentformat": "text/x-wiki",
                        "*": self.pages[title],
                    }
                }
            }
        return {"pageid": pageid, "ns": 0, "title": title, "revisions": [revision]}

    def callback(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if params.get("format") != "json" or params.get("action") != "query":
            return httpx.Response(status_code=404, text=f"Missing mock for the query parameters '{params}'")

        title = params["titles"]
        self.requested.append(title)
        if title in self.timeouts:
            raise httpx.ReadTimeout("timed out", request=request)
        if title in self.errors:
            return httpx.Response(status_code=self.errors[title], text="server error")

        pageid = len(self.requested)
        key = str(pageid) if title in self.pages else "-1"
        return httpx.Response(
            status_code=200,
            json={"batchcomplete": "", "query": {"pages": {key: self.page(pageid, title)}}},
        )


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    # never read the config files of the user running the tests
    monkeypatch.setattr(wir.config, "CONFIG_DIR", str(tmp_path_factory.mktemp("config")))


@pytest.fixture(scope="function")
def wiki(httpx_mock: pytest_httpx.HTTPXMock) -> MockWiki:
    wiki = MockWiki()
    httpx_mock.add_callback(
        wiki.callback, url=re.compile(re.escape(API_URL) + ".*"), is_optional=True, is_reusable=True
    )
    return wiki


@pytest.fixture(scope="function")
def connection() -> Iterator[Connection]:
    session = Connection.make_session()
    connection = Connection(API_URL, session, timeout=1)
    yield connection
    connection.close()


class SlowAPIHandler(http.server.BaseHTTPRequestHandler):
    """
    Serves a valid ``api.php`` response, but sends the body in small chunks
    with a pause after each of them. Every single read finishes quickly while
    the whole response takes several seconds.
    """

    chunk_size = 8
    chunk_delay = 0.25

    def do_GET(self):
        body = json.dumps(
            {
                "batchcomplete": "",
                "query": {"pages": {"1": {"pageid": 1, "ns": 0, "title": "Slow", "revisions": [{"*": "[[File:Slow.png]]"}]}}},
            }
        ).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        try:
            for i in range(0, len(body), self.chunk_size):
                self.wfile.write(body[i : i + self.chunk_size])
                self.wfile.flush()
                time.sleep(self.chunk_delay)
        except (BrokenPipeError, ConnectionResetError):
            # the client gave up
            pass

    def log_message(self, format, *args):
        logging.getLogger(__name__).debug(format % args)


@pytest.fixture(scope="function")
def slow_api_url() -> Iterator[str]:
    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), SlowAPIHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    yield f"http://{host}:{port}/api.php"
    server.shutdown()
    server.server_close()
    thread.join()
