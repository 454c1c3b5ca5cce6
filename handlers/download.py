import logging

from aiohttp import web

from data.loader import client_key
from misc.utils import is_tiktok_url, error_catch
from tiktok_api import resolve

download_routes = web.RouteTableDef()


@download_routes.get("/download")
async def download_tiktok(request: web.Request) -> web.Response:
    """Resolve to the best link, then redirect the browser to the MP4."""
    url = request.query.get("url")
    if not is_tiktok_url(url):
        return web.Response(text="Invalid TikTok URL", status=400)

    try:
        candidate = await resolve(url, request.app[client_key])
    except Exception as e:  # If something went wrong
        logging.error(error_catch(e))
        return web.Response(text=f"Error: {e}", status=500)

    if candidate is None:
        return web.Response(text="Failed to resolve video", status=500)

    logging.info(f'Video Download: {candidate.strategy_id} - VIDEO {url}')
    raise web.HTTPFound(candidate.media_url)
