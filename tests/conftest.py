import copy
from typing import Any, Union

import pytest

from data.config import config
from tiktok_api import TikTokClient

VIDEO_URL = "https://www.tiktok.com/@someone/video/7301234567890123456"


class FakeExtractor:
    """Extractor returning scripted outcomes per strategy.

    Each script value is either a response dict or an exception instance to
    raise. Versions missing from the script raise RuntimeError.
    """

    def __init__(self, script: dict[str, Union[dict[str, Any], BaseException]]):
        self.script = script
        self.calls: list[tuple[str, str]] = []

    async def extract(self, url: str, version: str) -> dict[str, Any]:
        self.calls.append((url, version))
        outcome = self.script.get(version, RuntimeError(f"{version} unavailable"))
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def success(result: dict[str, Any]) -> dict[str, Any]:
    return {"status": "success", "result": result}


@pytest.fixture
def app_config():
    cfg = copy.deepcopy(config)
    cfg["webhook"]["discord_url"] = ""
    return cfg


@pytest.fixture(autouse=True)
async def close_shared_connector():
    yield
    await TikTokClient.close_connector()
