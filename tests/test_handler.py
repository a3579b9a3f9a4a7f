"""
Tests for the aiohttp wallet endpoint.
"""
import pytest
from aiohttp import web

from navigator_wallet.conf import WalletConfig
from navigator_wallet.handler import WALLET_HANDLER, WalletHandler

PASSPHRASE = "correct-seed"


@pytest.fixture
def app(dispatcher):
    app = web.Application()
    WalletHandler(dispatcher).setup(app)
    return app


@pytest.fixture
async def client(aiohttp_client, app):
    return await aiohttp_client(app)


class TestWalletEndpoint:

    async def test_handler_registered(self, app):
        assert isinstance(app[WALLET_HANDLER], WalletHandler)

    async def test_request_response(self, client):
        resp = await client.post("/wallet", json={
            "type": "set-passphrase",
            "payload": {"passphrase": PASSPHRASE},
        })
        assert resp.status == 200
        assert await resp.json() is True

        resp = await client.post("/wallet", json={"type": "load-vault"})
        data = await resp.json()
        assert data["settings"]["inactivityInterval"] == 0

    async def test_wallet_error_is_a_200_value(self, client):
        resp = await client.post("/wallet", json={"type": "load-vault"})
        assert resp.status == 200
        data = await resp.json()
        assert data["isError"] is True
        assert data["type"] == "locked"

    async def test_invalid_json(self, client):
        resp = await client.post("/wallet", data=b"{not json")
        assert resp.status == 400
        data = await resp.json()
        assert data["type"] == "invalid_request"

    async def test_custom_route(self, aiohttp_client, dispatcher):
        app = web.Application()
        WalletHandler(dispatcher, route="/api/v1/wallet").setup(app)
        client = await aiohttp_client(app)
        resp = await client.post("/api/v1/wallet", json={"type": "get-app-version"})
        assert resp.status == 200

    async def test_shutdown_clears_session(self, aiohttp_client, app, dispatcher):
        client = await aiohttp_client(app)
        await client.post("/wallet", json={
            "type": "set-passphrase",
            "payload": {"passphrase": PASSPHRASE},
        })
        assert dispatcher.gateway.session.is_unlocked is True
        await client.close()
        assert dispatcher.gateway.session.is_unlocked is False


class TestFromConfig:

    async def test_configured_route(self, aiohttp_client, dispatcher):
        handler = WalletHandler.from_config(dispatcher, WalletConfig(route="/api/wallet"))
        app = web.Application()
        handler.setup(app)
        client = await aiohttp_client(app)

        resp = await client.post("/api/wallet", json={"type": "get-app-version"})
        assert resp.status == 200
        resp = await client.post("/wallet", json={"type": "get-app-version"})
        assert resp.status == 404

    def test_route_from_env(self, monkeypatch, dispatcher):
        monkeypatch.setenv("WALLET_ROUTE", "/v2/wallet")
        assert WalletHandler.from_config(dispatcher).route == "/v2/wallet"
