import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from .errors import CapExceeded, DuplicateId, StoreUnavailable, ValidationFailed
from .issuer import TicketingClient, TicketRequest
from .models import Ticket
from .store import TicketStore

logger = logging.getLogger(__name__)

MAX_TICKETS_PER_VATIN = 3

REQUIRED_FIELDS = (("vatin", "vatin"), ("first_name", "firstName"), ("last_name", "lastName"))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IssuanceWorkflow:
    """Cap check, external authorize + issue, then local insert.

    Any step's failure aborts the rest. There is no compensation: when the
    external ticket was created but the local insert fails, the error carries
    the idempotency key sent upstream so the request can be replayed safely.
    """

    def __init__(
        self,
        store: TicketStore,
        client: TicketingClient,
        cap: int = MAX_TICKETS_PER_VATIN,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.client = client
        self.cap = cap
        self.clock = clock

    async def issue(self, req: TicketRequest, idempotency_key: str | None = None) -> str:
        req = TicketRequest(
            vatin=(req.vatin or "").strip(),
            first_name=(req.first_name or "").strip(),
            last_name=(req.last_name or "").strip(),
        )
        missing = [name for attr, name in REQUIRED_FIELDS if not getattr(req, attr)]
        if missing:
            raise ValidationFailed(missing)

        if idempotency_key:
            replayed = self.store.get_by_idempotency_key(idempotency_key)
            if replayed is not None:
                logger.info("replaying issuance key=%s ticket=%s", idempotency_key, replayed.id)
                return replayed.id

        count = self.store.count_by_identity(req.vatin)
        logger.debug("vatin=%s has %d tickets", req.vatin, count)
        if count >= self.cap:
            raise CapExceeded(req.vatin, self.cap)

        key = idempotency_key or str(uuid.uuid4())
        token = await self.client.authorize()
        await self.client.issue(req, token, key)

        ticket = Ticket(
            id=str(uuid.uuid4()),
            vatin=req.vatin,
            first_name=req.first_name,
            last_name=req.last_name,
            created_at=self.clock(),
            idempotency_key=key,
        )
        try:
            stored = self.store.insert(ticket, cap=self.cap)
        except (StoreUnavailable, CapExceeded, DuplicateId) as e:
            # CapExceeded here means a concurrent request took the last slot after our check
            e.reconciliation_key = key
            logger.error("external ticket exists but local insert failed (%s), reconcile key=%s", type(e).__name__, key)
            raise

        logger.info("ticket issued id=%s at=%s", stored.id, stored.created_at.isoformat())
        logger.debug("ticket id=%s belongs to vatin=%s", stored.id, stored.vatin)
        return stored.id
