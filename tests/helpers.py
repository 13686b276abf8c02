import uuid
from datetime import datetime, timedelta, timezone

import httpx
from jose import jwt
from redis.exceptions import ConnectionError as RedisConnectionError

from qrticket.models import Ticket

def mint_access_token(audience, ttl_minutes=10, secret="upstream-signing-key"):
    exp = int((datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)).timestamp())
    payload = {"iss": "https://auth.example.test/", "sub": "test-client@clients", "aud": audience, "exp": exp}
    return jwt.encode(payload, secret, algorithm="HS256")

def make_ticket(vatin="69435151530", first_name="Ivana", last_name="Kovac", ticket_id=None):
    return Ticket(
        id=ticket_id or str(uuid.uuid4()),
        vatin=vatin,
        first_name=first_name,
        last_name=last_name,
        created_at=datetime.now(timezone.utc),
    )

class FakeUpstream:
    """Stands in for the authorization server and the ticketing API."""

    def __init__(self, settings):
        self.settings = settings
        self.token = mint_access_token(settings.ticket_api_audience)
        self.token_status = 200
        self.issue_status = 201
        self.issue_error = None
        self.token_calls = []
        self.issue_calls = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url == self.settings.token_url:
            self.token_calls.append(request)
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "access_denied"})
            return httpx.Response(200, json={"access_token": self.token, "token_type": "Bearer", "expires_in": 600})

        if url == self.settings.ticket_api_url:
            self.issue_calls.append(request)
            if self.issue_error is not None:
                raise self.issue_error
            if self.issue_status >= 400:
                return httpx.Response(self.issue_status, text="upstream says no")
            return httpx.Response(self.issue_status, json={"status": "created"})

        return httpx.Response(404)

class FakeRedis:
    def __init__(self):
        self.data = {}
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key):
        if self.fail_reads:
            raise RedisConnectionError("redis is down")
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        if self.fail_writes:
            raise RedisConnectionError("redis is down")
        self.data[key] = value

async def issue(client: httpx.AsyncClient, vatin="69435151530", first_name="Ivana", last_name="Kovac", headers=None):
    return await client.post(
        "/generate-ticket",
        data={"vatin": vatin, "firstName": first_name, "lastName": last_name},
        headers=headers or {},
    )
