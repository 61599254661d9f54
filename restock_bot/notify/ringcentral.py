"""RingCentral team messaging client."""

import logging
from typing import Any

import httpx

from restock_bot.config import settings
from restock_bot.errors import DeliveryError

logger = logging.getLogger(__name__)

JWT_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
MESSAGE_SEPARATOR = "\n---\n"


class RingCentralClient:
    """
    Posts messages and Adaptive Cards to one team chat.

    Every send performs a fresh JWT login; access tokens are never kept
    between sends.
    """

    def __init__(
        self,
        server_url: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        jwt: str | None = None,
        chat_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.server_url = (server_url or settings.rc_server_url).rstrip("/")
        self.client_id = client_id if client_id is not None else settings.rc_client_id
        self.client_secret = client_secret if client_secret is not None else settings.rc_client_secret
        self.jwt = jwt if jwt is not None else settings.rc_jwt
        self.chat_id = chat_id or settings.rc_chat_id
        self.timeout = timeout or settings.chat_timeout_seconds
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.server_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def login(self) -> str:
        """
        Exchange the JWT credential for an access token.

        Raises:
            DeliveryError: If credentials are missing or the grant fails
        """
        if not self.jwt:
            logger.error("RingCentral JWT not found")
            raise DeliveryError("RingCentral JWT not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                "/restapi/oauth/token",
                data={"grant_type": JWT_GRANT_TYPE, "assertion": self.jwt},
                auth=(self.client_id, self.client_secret),
            )
            response.raise_for_status()
            return response.json()["access_token"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise DeliveryError(f"RingCentral login failed: {e}") from e

    async def _send(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        token = await self.login()
        client = await self._get_client()
        try:
            response = await client.request(
                method,
                path,
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            return response.json() if response.content else {}
        except (httpx.HTTPError, ValueError) as e:
            raise DeliveryError(f"RingCentral {method} {path} failed: {e}") from e

    async def post_text(self, message: str) -> dict[str, Any]:
        """Post a plain-text message to the chat."""
        payload = {"text": f"{message}{MESSAGE_SEPARATOR}"}
        result = await self._send("POST", f"/team-messaging/v1/chats/{self.chat_id}/posts", payload)
        logger.info(f"Posted text message to chat {self.chat_id}")
        return result

    async def post_card(self, card: dict[str, Any]) -> dict[str, Any]:
        """Post an Adaptive Card to the chat. The response carries the card ``id``."""
        result = await self._send(
            "POST", f"/team-messaging/v1/chats/{self.chat_id}/adaptive-cards", card
        )
        logger.info(f"Posted adaptive card {result.get('id')} to chat {self.chat_id}")
        return result

    async def update_card(self, card_id: str, card: dict[str, Any]) -> dict[str, Any]:
        """Replace a previously posted Adaptive Card."""
        result = await self._send("PUT", f"/team-messaging/v1/adaptive-cards/{card_id}", card)
        logger.info(f"Updated adaptive card {card_id}")
        return result
