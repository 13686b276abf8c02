import logging

from fastapi import Depends, FastAPI, Form, Header, Request
from fastapi.responses import JSONResponse, RedirectResponse
from redis.asyncio import Redis

from .config import load_settings
from .db import Base, make_engine, make_session_factory
from .errors import NotFound, TicketError
from .idempotency import get_issued_ticket, remember_issued_ticket
from .issuer import TicketingClient, TicketRequest
from .store import TicketStore
from .templates import render_template
from .views import TicketViews
from .workflow import MAX_TICKETS_PER_VATIN, IssuanceWorkflow

# --- Config / globals ---
settings = load_settings()

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

engine = make_engine(settings.database_url)
SessionLocal = make_session_factory(engine)

# Replay cache is optional; without it Idempotency-Key is only forwarded upstream
redis = Redis.from_url(settings.redis_url, decode_responses=True) if settings.redis_url else None

app = FastAPI(title="QR Ticket Issuer", version="1.0.0")

Base.metadata.create_all(bind=engine)


# --- Dependencies ---
def get_store() -> TicketStore:
    return TicketStore(SessionLocal)

def get_ticketing_client() -> TicketingClient:
    return TicketingClient(settings)

def get_redis():
    return redis

def get_workflow(
    store: TicketStore = Depends(get_store),
    client: TicketingClient = Depends(get_ticketing_client),
) -> IssuanceWorkflow:
    return IssuanceWorkflow(store, client)

def get_views(store: TicketStore = Depends(get_store)) -> TicketViews:
    return TicketViews(store, settings.base_url)


@app.exception_handler(TicketError)
async def ticket_error_handler(request: Request, exc: TicketError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s refused: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


@app.get("/")
def home(vatin: str | None = None, store: TicketStore = Depends(get_store)):
    count = store.count_by_identity(vatin) if vatin else None
    return render_template("home.html", count=count, cap=MAX_TICKETS_PER_VATIN)


@app.post("/generate-ticket")
async def generate_ticket(
    vatin: str = Form(default=""),
    first_name: str = Form(default="", alias="firstName"),
    last_name: str = Form(default="", alias="lastName"),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    workflow: IssuanceWorkflow = Depends(get_workflow),
    cache=Depends(get_redis),
):
    if idempotency_key:
        cached = await get_issued_ticket(cache, idempotency_key)
        if cached:
            logger.info("replaying issuance key=%s ticket=%s", idempotency_key, cached)
            return RedirectResponse(url=f"/ticket/{cached}", status_code=303)

    req = TicketRequest(vatin=vatin, first_name=first_name, last_name=last_name)
    ticket_id = await workflow.issue(req, idempotency_key=idempotency_key)

    if idempotency_key:
        await remember_issued_ticket(cache, idempotency_key, ticket_id)
    return RedirectResponse(url=f"/ticket/{ticket_id}", status_code=303)


@app.get("/ticket/{ticket_id}")
def show_ticket(ticket_id: str, views: TicketViews = Depends(get_views)):
    try:
        view = views.owner_view(ticket_id)
    except NotFound:
        return render_template("not_found.html", status_code=404)
    return render_template("ticket.html", t=view)


@app.get("/scanned/{ticket_id}")
def show_scanned(ticket_id: str, views: TicketViews = Depends(get_views)):
    try:
        view = views.scan_view(ticket_id)
    except NotFound:
        return render_template("not_found.html", status_code=404)
    return render_template("scanned.html", t=view)
