"""
Wallet Handler — aiohttp transport for the wallet dispatcher.

Exposes a single JSON endpoint; each POST carries one request and gets one
response. Wallet errors are values and travel with HTTP 200, only bodies that
are not JSON at all are answered with 400.
"""
import logging
from typing import Any, Optional

import orjson
from aiohttp import web

from .conf import DEFAULT_ROUTE, WalletConfig
from .dispatcher import Dispatcher
from .exceptions import InvalidRequest
from .messages import Failure

logger = logging.getLogger("navigator.wallet")


class WalletHandler:
    """Binds a Dispatcher to an aiohttp application."""

    def __init__(self, dispatcher: Dispatcher, route: str = DEFAULT_ROUTE):
        self.dispatcher = dispatcher
        self.route = route

    @classmethod
    def from_config(
        cls,
        dispatcher: Dispatcher,
        config: Optional[WalletConfig] = None
    ) -> "WalletHandler":
        """Handler mounted at the configured route (WALLET_ROUTE)."""
        config = config or WalletConfig.from_env()
        return cls(dispatcher, route=config.route)

    def setup(self, app: web.Application) -> None:
        app[WALLET_HANDLER] = self
        app.router.add_post(self.route, self.handle)
        app.on_shutdown.append(self.on_shutdown)
        logger.debug("Wallet endpoint registered at %s", self.route)

    @staticmethod
    def _json(data: Any, status: int = 200) -> web.Response:
        return web.Response(
            body=orjson.dumps(data),
            status=status,
            content_type="application/json",
        )

    async def handle(self, request: web.Request) -> web.Response:
        body = await request.read()
        try:
            message = orjson.loads(body)
        except orjson.JSONDecodeError:
            failure = Failure.from_error(
                InvalidRequest("Request body is not valid JSON")
            )
            return self._json(failure.to_wire(), status=400)
        response = await self.dispatcher.dispatch(message)
        return self._json(response.to_wire())

    async def on_shutdown(self, app: web.Application) -> None:
        """Session teardown: the passphrase does not outlive the server."""
        gateway = self.dispatcher.gateway
        await gateway.notices.drain()
        gateway.session.destroy()


WALLET_HANDLER = web.AppKey("wallet_handler", WalletHandler)
