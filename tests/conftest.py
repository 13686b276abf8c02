import os

# point the app at throwaway backends before qrticket.main reads its config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BASE_URL"] = "http://testserver"
os.environ["AUTH0_DOMAIN"] = "https://auth.example.test"
os.environ["AUTH0_M2M_CLIENT_ID"] = "test-client"
os.environ["AUTH0_M2M_CLIENT_SECRET"] = "test-secret"
os.environ["TICKET_API_URL"] = "https://tickets.example.test/ticket"
os.environ["TICKET_API_AUDIENCE"] = "https://tickets.example.test/ticket"
os.environ["REDIS_URL"] = ""

import httpx
import pytest
import pytest_asyncio

from qrticket import main
from qrticket.db import Base
from qrticket.issuer import TicketingClient
from qrticket.store import TicketStore
from tests.helpers import FakeRedis, FakeUpstream

@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=main.engine)
    Base.metadata.create_all(bind=main.engine)
    yield

@pytest.fixture
def settings():
    return main.settings

@pytest.fixture
def store():
    return TicketStore(main.SessionLocal)

@pytest.fixture
def upstream(settings):
    return FakeUpstream(settings)

@pytest.fixture
def ticketing(settings, upstream):
    return TicketingClient(settings, transport=httpx.MockTransport(upstream.handle))

@pytest.fixture
def fake_redis():
    return FakeRedis()

@pytest_asyncio.fixture(scope="function")
async def client(ticketing, fake_redis):
    main.app.dependency_overrides[main.get_ticketing_client] = lambda: ticketing
    main.app.dependency_overrides[main.get_redis] = lambda: fake_redis
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=main.app), base_url="http://testserver", timeout=10.0) as c:
            yield c
    finally:
        main.app.dependency_overrides.clear()
