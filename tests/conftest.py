# File: tests/conftest.py
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Dict, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web

from site_harvest.config import CrawlOptions
from site_harvest.logger import LOGGER_NAME

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
Route = Union[Handler, str, bytes, Tuple[bytes, str]]


def html_page(body: str) -> Handler:
    """Handler returning *body* as text/html."""

    async def handler(_):
        return web.Response(text=body, content_type="text/html")

    return handler


def binary(data: bytes, content_type: str = "application/octet-stream") -> Handler:
    async def handler(_):
        return web.Response(body=data, content_type=content_type)

    return handler


@pytest.fixture(autouse=True)
def reset_logger():
    """Снимает обработчики, повешенные init_logging (CLI-тесты), до и после теста."""

    def _clear():
        lg = logging.getLogger(LOGGER_NAME)
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    _clear()
    yield
    _clear()


@pytest.fixture()
def hits() -> Counter:
    """Number of requests per path, filled by the ``serve`` fixture."""
    return Counter()


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory, hits) -> AsyncIterator[Callable[[Dict[str, Route]], Awaitable[str]]]:
    """
    Start a local aiohttp app from ``{path: handler | html str | bytes | (bytes, content_type)}``.

    Returns the base URL (``http://127.0.0.1:<port>``); all apps are cleaned up
    after the test.
    """
    runners: list[web.AppRunner] = []

    @web.middleware
    async def count_hits(request, handler):
        hits[request.path] += 1
        return await handler(request)

    async def _serve(routes: Dict[str, Route]) -> str:
        app = web.Application(middlewares=[count_hits])
        for path, route in routes.items():
            if isinstance(route, str):
                route = html_page(route)
            elif isinstance(route, bytes):
                route = binary(route)
            elif isinstance(route, tuple):
                route = binary(*route)
            app.router.add_get(path, route)
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    try:
        yield _serve
    finally:
        for runner in runners:
            await runner.cleanup()


@pytest.fixture()
def download_root(tmp_path) -> Path:
    return tmp_path / "downloads"


@pytest.fixture()
def make_options(download_root) -> Callable[..., CrawlOptions]:
    """
    Factory for CrawlOptions suited to tests: recursive, no throttle delay,
    downloads under tmp_path.
    """

    def factory(**overrides) -> CrawlOptions:
        data = dict(recursive=True, delay=0, timeout=5.0, download_dir=download_root)
        data.update(overrides)
        return CrawlOptions(**data)

    return factory
