import logging

import httpx
from pydantic import BaseModel

from .config import Settings
from .errors import AuthorizationFailed, ExternalIssuanceFailed
from .security import check_bearer_token

logger = logging.getLogger(__name__)


class TicketRequest(BaseModel):
    vatin: str = ""
    first_name: str = ""
    last_name: str = ""


class TicketingClient:
    """Client for the external ticketing authority.

    Issuance is two calls: a client-credentials token exchange, then the
    ticket POST carrying that bearer token. Tokens are used once and never
    cached. Nothing is retried.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.settings.http_timeout)

    async def authorize(self) -> str:
        body = {
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "audience": self.settings.ticket_api_audience,
            "grant_type": "client_credentials",
        }
        try:
            async with self._client() as client:
                r = await client.post(self.settings.token_url, json=body)
        except httpx.HTTPError as e:
            logger.error("token exchange failed: %s", e)
            raise AuthorizationFailed(type(e).__name__) from e

        if not r.is_success:
            logger.error("token exchange rejected status=%s body=%s", r.status_code, r.text)
            raise AuthorizationFailed(f"status {r.status_code}")

        try:
            token = r.json().get("access_token")
        except ValueError:
            token = None
        if not token:
            raise AuthorizationFailed("no access_token in response")

        try:
            check_bearer_token(token, self.settings.ticket_api_audience)
        except ValueError as e:
            raise AuthorizationFailed(str(e)) from e

        return token

    async def issue(self, req: TicketRequest, token: str, idempotency_key: str) -> dict:
        body = {"vatin": req.vatin, "firstName": req.first_name, "lastName": req.last_name}
        headers = {"Authorization": f"Bearer {token}", "Idempotency-Key": idempotency_key}
        try:
            async with self._client() as client:
                r = await client.post(self.settings.ticket_api_url, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error("ticket issuance call failed key=%s: %s", idempotency_key, e)
            raise ExternalIssuanceFailed(None, str(e) or type(e).__name__) from e

        if not r.is_success:
            logger.error("ticket issuance rejected key=%s status=%s", idempotency_key, r.status_code)
            raise ExternalIssuanceFailed(r.status_code, r.text)

        try:
            return r.json()
        except ValueError:
            return {}
