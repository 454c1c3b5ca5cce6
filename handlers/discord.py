import logging

from aiohttp import web

from data.loader import client_key, config_key
from misc.utils import is_tiktok_url
from misc.webhook import WebhookError, send_to_webhook
from tiktok_api import resolve

discord_routes = web.RouteTableDef()


@discord_routes.post("/send-to-discord")
async def send_to_discord(request: web.Request) -> web.Response:
    webhook_url = request.app[config_key]["webhook"]["discord_url"]
    # Forwarding is only available when a webhook is configured
    if not webhook_url:
        return web.json_response({"ok": False, "error": "Webhook not configured"}, status=400)

    url = request.query.get("url")
    if not url:
        return web.json_response({"ok": False, "error": "Missing TikTok URL"}, status=400)
    if not is_tiktok_url(url):
        return web.json_response({"ok": False, "error": "Invalid TikTok URL"}, status=400)

    candidate = await resolve(url, request.app[client_key])
    if candidate is None:
        return web.json_response({"ok": False, "error": "Failed to resolve video"}, status=500)

    try:
        await send_to_webhook(webhook_url, candidate.media_url)
    except WebhookError as e:
        logging.error(f'Cant send to webhook: {e}')
        return web.json_response({"ok": False, "error": "Failed to send to webhook"}, status=502)

    logging.info(f'Webhook Forward: {candidate.strategy_id} - VIDEO {url}')
    return web.json_response({"ok": True})
