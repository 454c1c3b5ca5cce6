import logging

from aiohttp import web

from data.loader import client_key
from misc.utils import is_tiktok_url
from tiktok_api import resolve

api_routes = web.RouteTableDef()


@api_routes.get("/api/tiktok")
async def get_tiktok_link(request: web.Request) -> web.Response:
    url = request.query.get("url")
    # Reject anything that is not a TikTok link before resolving
    if not is_tiktok_url(url):
        return web.json_response({"ok": False, "error": "Invalid TikTok URL"}, status=400)

    candidate = await resolve(url, request.app[client_key])
    if candidate is None:
        return web.json_response({"ok": False, "error": "Failed to fetch video"}, status=500)

    logging.info(f'Link Resolved: {candidate.strategy_id} {candidate.quality_label} - VIDEO {url}')
    return web.json_response({"ok": True, **candidate.to_dict()})
