"""
Shared fixtures: a local aiohttp site serving canned pages.
"""

import asyncio
from typing import Dict, Optional, Tuple

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer


class FakeSite:
    """Serves ``pages`` (path -> (status, body)) and tracks concurrent requests."""

    def __init__(self, pages: Dict[str, Tuple[int, str]], delay: float = 0.0,
                 seed_path: str = "/"):
        self.pages = pages
        self.delay = delay
        self.seed_path = seed_path
        self.requests = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.server: Optional[TestServer] = None

    async def handle(self, request: web.Request) -> web.Response:
        path = request.path
        self.requests.append(path)
        linked = path != self.seed_path
        if linked:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if linked and self.delay:
                await asyncio.sleep(self.delay)
            status, body = self.pages.get(path, (404, "not found"))
            return web.Response(status=status, text=body, content_type="text/html")
        finally:
            if linked:
                self.in_flight -= 1

    def url(self, path: str = "/") -> str:
        return str(self.server.make_url(path))


@pytest_asyncio.fixture
async def serve():
    """Start a FakeSite; usage: ``site = await serve(pages)``."""
    servers = []

    async def _serve(pages, **kwargs) -> FakeSite:
        site = FakeSite(pages, **kwargs)
        app = web.Application()
        app.router.add_get("/{tail:.*}", site.handle)
        site.server = TestServer(app)
        await site.server.start_server()
        servers.append(site.server)
        return site

    yield _serve

    for server in servers:
        await server.close()
