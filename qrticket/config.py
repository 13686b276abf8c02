import os

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_TICKET_API = "https://web2-qr-kod-api.com/ticket"


class Settings(BaseModel):
    database_url: str
    base_url: str
    auth_domain: str
    client_id: str
    client_secret: str
    ticket_api_url: str = DEFAULT_TICKET_API
    ticket_api_audience: str = DEFAULT_TICKET_API
    http_timeout: float = 10.0
    redis_url: str | None = None
    log_level: str = "INFO"

    @property
    def token_url(self) -> str:
        return f"{self.auth_domain.rstrip('/')}/oauth/token"


def load_settings() -> Settings:
    # .env values never override variables already set in the environment
    load_dotenv()

    return Settings(
        database_url=os.environ["DATABASE_URL"],
        base_url=os.environ["BASE_URL"].rstrip("/"),
        auth_domain=os.environ["AUTH0_DOMAIN"],
        client_id=os.environ["AUTH0_M2M_CLIENT_ID"],
        client_secret=os.environ["AUTH0_M2M_CLIENT_SECRET"],
        ticket_api_url=os.environ.get("TICKET_API_URL", DEFAULT_TICKET_API),
        ticket_api_audience=os.environ.get("TICKET_API_AUDIENCE", DEFAULT_TICKET_API),
        http_timeout=float(os.environ.get("HTTP_TIMEOUT_SECONDS", "10")),
        redis_url=os.environ.get("REDIS_URL") or None,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
