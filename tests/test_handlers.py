"""
Tests for the HTTP gateway routes.

Each test builds the app with a scripted extractor, so routes are exercised
without any real extraction backend.
"""

import pytest
from aiohttp import web

from data.app_factory import create_app
from tests.conftest import VIDEO_URL, FakeExtractor, success

FOUND = {"v3": success({"video": {"noWatermark": "http://cdn/nwm.mp4"}})}
NOTHING = {"v3": {"status": "fail"}, "v2": RuntimeError("boom"), "v1": success({})}


@pytest.fixture
def make_client(aiohttp_client, app_config):
    async def factory(script, cfg=None):
        extractor = FakeExtractor(script)
        client = await aiohttp_client(create_app(extractor, cfg or app_config))
        return client, extractor

    return factory


class TestApiRoute:
    """GET /api/tiktok"""

    async def test_success(self, make_client):
        client, _ = await make_client(FOUND)

        resp = await client.get("/api/tiktok", params={"url": VIDEO_URL})

        assert resp.status == 200
        assert await resp.json() == {
            "ok": True,
            "url": "http://cdn/nwm.mp4",
            "quality": "HD No Watermark",
            "version": "v3",
        }

    @pytest.mark.parametrize("params", [{}, {"url": ""}, {"url": "https://www.youtube.com/watch?v=x"}])
    async def test_invalid_url(self, make_client, params):
        client, extractor = await make_client(FOUND)

        resp = await client.get("/api/tiktok", params=params)

        assert resp.status == 400
        assert await resp.json() == {"ok": False, "error": "Invalid TikTok URL"}
        assert extractor.calls == []

    async def test_not_found(self, make_client):
        client, extractor = await make_client(NOTHING)

        resp = await client.get("/api/tiktok", params={"url": VIDEO_URL})

        assert resp.status == 500
        assert await resp.json() == {"ok": False, "error": "Failed to fetch video"}
        assert len(extractor.calls) == 3

    async def test_cors_headers(self, make_client):
        client, _ = await make_client(FOUND)

        resp = await client.get("/api/tiktok", params={"url": VIDEO_URL})

        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    async def test_preflight(self, make_client):
        client, _ = await make_client(FOUND)

        resp = await client.options("/api/tiktok")

        assert resp.status == 204
        assert "GET" in resp.headers["Access-Control-Allow-Methods"]


class TestDownloadRoute:
    """GET /download"""

    async def test_redirects_to_media(self, make_client):
        client, _ = await make_client(FOUND)

        resp = await client.get("/download", params={"url": VIDEO_URL}, allow_redirects=False)

        assert resp.status == 302
        assert resp.headers["Location"] == "http://cdn/nwm.mp4"

    async def test_invalid_url(self, make_client):
        client, _ = await make_client(FOUND)

        resp = await client.get("/download", params={"url": "https://example.com/video"})

        assert resp.status == 400
        assert await resp.text() == "Invalid TikTok URL"

    async def test_not_found(self, make_client):
        client, _ = await make_client(NOTHING)

        resp = await client.get("/download", params={"url": VIDEO_URL}, allow_redirects=False)

        assert resp.status == 500
        assert await resp.text() == "Failed to resolve video"

    async def test_unexpected_error(self, make_client, monkeypatch):
        async def exploding_resolve(url, extractor):
            raise RuntimeError("resolver exploded")

        monkeypatch.setattr("handlers.download.resolve", exploding_resolve)
        client, _ = await make_client(FOUND)

        resp = await client.get("/download", params={"url": VIDEO_URL}, allow_redirects=False)

        assert resp.status == 500
        assert await resp.text() == "Error: resolver exploded"


class TestDiscordRoute:
    """POST /send-to-discord"""

    @pytest.fixture
    async def webhook(self, aiohttp_server):
        received = []

        async def handler(request):
            received.append(await request.json())
            return web.Response(status=204)

        app = web.Application()
        app.router.add_post("/hook", handler)
        server = await aiohttp_server(app)
        return str(server.make_url("/hook")), received

    async def test_not_configured(self, make_client):
        client, extractor = await make_client(FOUND)

        resp = await client.post("/send-to-discord", params={"url": VIDEO_URL})

        assert resp.status == 400
        assert await resp.json() == {"ok": False, "error": "Webhook not configured"}
        assert extractor.calls == []

    async def test_missing_url(self, make_client, app_config, webhook):
        app_config["webhook"]["discord_url"] = webhook[0]
        client, _ = await make_client(FOUND, app_config)

        resp = await client.post("/send-to-discord")

        assert resp.status == 400
        assert await resp.json() == {"ok": False, "error": "Missing TikTok URL"}

    async def test_invalid_url(self, make_client, app_config, webhook):
        app_config["webhook"]["discord_url"] = webhook[0]
        client, _ = await make_client(FOUND, app_config)

        resp = await client.post("/send-to-discord", params={"url": "https://example.com/v"})

        assert resp.status == 400
        assert await resp.json() == {"ok": False, "error": "Invalid TikTok URL"}

    async def test_forwards_link(self, make_client, app_config, webhook):
        hook_url, received = webhook
        app_config["webhook"]["discord_url"] = hook_url
        client, _ = await make_client(FOUND, app_config)

        resp = await client.post("/send-to-discord", params={"url": VIDEO_URL})

        assert resp.status == 200
        assert await resp.json() == {"ok": True}
        assert received == [{"content": "🎬 **TikTok HD link:**\nhttp://cdn/nwm.mp4"}]

    async def test_not_found(self, make_client, app_config, webhook):
        hook_url, received = webhook
        app_config["webhook"]["discord_url"] = hook_url
        client, _ = await make_client(NOTHING, app_config)

        resp = await client.post("/send-to-discord", params={"url": VIDEO_URL})

        assert resp.status == 500
        assert await resp.json() == {"ok": False, "error": "Failed to resolve video"}
        assert received == []

    async def test_webhook_failure(self, make_client, app_config, aiohttp_unused_port):
        app_config["webhook"]["discord_url"] = f"http://127.0.0.1:{aiohttp_unused_port()}/hook"
        client, _ = await make_client(FOUND, app_config)

        resp = await client.post("/send-to-discord", params={"url": VIDEO_URL})

        assert resp.status == 502
        assert await resp.json() == {"ok": False, "error": "Failed to send to webhook"}


async def test_index_page(make_client):
    client, _ = await make_client(FOUND)

    resp = await client.get("/")

    assert resp.status == 200
    assert resp.content_type == "text/html"
    body = await resp.text()
    assert "My TikTok Downloader" in body
    assert "/api/tiktok?url=" in body
    assert "/download?url=" in body
