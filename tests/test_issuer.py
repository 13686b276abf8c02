import json

import httpx
import pytest

from qrticket.errors import AuthorizationFailed, ExternalIssuanceFailed
from qrticket.issuer import TicketRequest, TicketingClient
from tests.helpers import mint_access_token

pytestmark = pytest.mark.asyncio

REQ = TicketRequest(vatin="69435151530", first_name="Ivana", last_name="Kovac")

async def test_authorize_uses_client_credentials(ticketing, upstream, settings):
    token = await ticketing.authorize()
    assert token == upstream.token

    body = json.loads(upstream.token_calls[0].content)
    assert body == {
        "client_id": "test-client",
        "client_secret": "test-secret",
        "audience": settings.ticket_api_audience,
        "grant_type": "client_credentials",
    }

async def test_authorize_rejected(ticketing, upstream):
    upstream.token_status = 401
    with pytest.raises(AuthorizationFailed):
        await ticketing.authorize()

async def test_authorize_transport_error(settings):
    def down(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = TicketingClient(settings, transport=httpx.MockTransport(down))
    with pytest.raises(AuthorizationFailed):
        await client.authorize()

async def test_authorize_rejects_token_for_other_audience(ticketing, upstream):
    upstream.token = mint_access_token("https://some-other-api.example.test")
    with pytest.raises(AuthorizationFailed):
        await ticketing.authorize()

async def test_authorize_rejects_expired_token(ticketing, upstream, settings):
    upstream.token = mint_access_token(settings.ticket_api_audience, ttl_minutes=-5)
    with pytest.raises(AuthorizationFailed):
        await ticketing.authorize()

async def test_authorize_rejects_opaque_token(ticketing, upstream):
    upstream.token = "not-a-jwt"
    with pytest.raises(AuthorizationFailed):
        await ticketing.authorize()

async def test_issue_sends_bearer_and_idempotency_key(ticketing, upstream):
    await ticketing.issue(REQ, "tok-123", "key-abc")

    sent = upstream.issue_calls[0]
    assert sent.method == "POST"
    assert sent.headers["Authorization"] == "Bearer tok-123"
    assert sent.headers["Idempotency-Key"] == "key-abc"
    assert json.loads(sent.content) == {"vatin": "69435151530", "firstName": "Ivana", "lastName": "Kovac"}

async def test_issue_rejected_carries_upstream_status_and_body(ticketing, upstream):
    upstream.issue_status = 409
    with pytest.raises(ExternalIssuanceFailed) as exc:
        await ticketing.issue(REQ, "tok", "key")
    assert exc.value.upstream_status == 409
    assert exc.value.upstream_body == "upstream says no"

async def test_issue_timeout(ticketing, upstream):
    upstream.issue_error = httpx.ReadTimeout("timed out")
    with pytest.raises(ExternalIssuanceFailed) as exc:
        await ticketing.issue(REQ, "tok", "key")
    assert exc.value.upstream_status is None
