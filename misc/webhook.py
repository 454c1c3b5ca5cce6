import asyncio
import logging
from typing import Optional

import aiohttp

WEBHOOK_TEMPLATE = "🎬 **TikTok HD link:**\n{url}"


class WebhookError(Exception):
    """Webhook endpoint rejected the message or could not be reached."""

    pass


async def send_to_webhook(
    webhook_url: str, media_url: str, session: Optional[aiohttp.ClientSession] = None
) -> None:
    payload = {"content": WEBHOOK_TEMPLATE.format(url=media_url)}
    logging.info("Sending resolved link to webhook")
    try:
        if session is None:
            async with aiohttp.ClientSession() as client:
                await _post(client, webhook_url, payload)
        else:
            await _post(session, webhook_url, payload)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logging.error(f"Webhook request failed: {e}")
        raise WebhookError(str(e)) from e


async def _post(client: aiohttp.ClientSession, webhook_url: str, payload: dict) -> None:
    async with client.post(webhook_url, json=payload) as response:
        code = response.status
        logging.info(f"Webhook responded with status code: {code}")
        if code >= 300:
            raise WebhookError(f"Webhook error code: {code}")
