import logging
from typing import Any

from aiohttp import web

from data.config import config
from tiktok_api import Extractor

client_key = web.AppKey("client", Extractor)
config_key = web.AppKey("config", dict[str, Any])


def setup_logging(level: str = config["logs"]["level"]):
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)-5.5s]  %(message)s",
        handlers=[
            # logging.FileHandler("gateway.log"),
            logging.StreamHandler()
        ]
    )
    logging.getLogger('aiohttp.access').setLevel(logging.WARNING)
