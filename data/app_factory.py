"""Application factory for the HTTP gateway."""

import asyncio
import logging
from typing import Any, List, Optional

from aiohttp import web

from data.config import config
from data.loader import client_key, config_key, setup_logging
from tiktok_api import Extractor, TikTokClient

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Allow cross-origin calls from any page, answer preflights directly."""
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as e:
        e.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


async def close_client_resources(app: web.Application):
    """Release pooled connections and worker threads on shutdown."""
    await TikTokClient.close_connector()
    TikTokClient.shutdown_executor()


class GatewayApplication:
    """Gateway application with shared configuration and route tables."""

    def __init__(self, client: Optional[Extractor] = None, app_config: Optional[dict[str, Any]] = None):
        self.config = app_config or config
        self.client = client or TikTokClient()
        self._routes: List[web.RouteTableDef] = []

    def include_routes(self, *route_tables: web.RouteTableDef):
        """Add route tables to the application."""
        self._routes.extend(route_tables)

    def _setup_routes(self):
        """Setup all standard gateway routes."""
        from handlers.api import api_routes
        from handlers.discord import discord_routes
        from handlers.download import download_routes
        from handlers.ui import ui_routes

        self.include_routes(
            ui_routes,
            api_routes,
            download_routes,
            discord_routes
        )

    def build(self) -> web.Application:
        """Create the aiohttp application."""
        if not self._routes:
            self._setup_routes()

        app = web.Application(middlewares=[cors_middleware])
        app[config_key] = self.config
        app[client_key] = self.client
        for routes in self._routes:
            app.add_routes(routes)
        app.on_cleanup.append(close_client_resources)
        return app

    async def start(self):
        """Start serving until cancelled."""
        runner = web.AppRunner(self.build())
        await runner.setup()

        host = self.config["server"]["host"]
        port = self.config["server"]["port"]
        site = web.TCPSite(runner, host, port)
        await site.start()
        logging.info(f"🚀 Server running on {host}:{port}")

        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()


def create_app(client: Optional[Extractor] = None, app_config: Optional[dict[str, Any]] = None) -> web.Application:
    """Factory function to create the gateway aiohttp application."""
    return GatewayApplication(client, app_config).build()


async def run_gateway():
    """Run the gateway."""
    setup_logging()
    app = GatewayApplication()
    await app.start()
