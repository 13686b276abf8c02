import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import CapExceeded, DuplicateId, NotFound, StoreUnavailable
from .models import Ticket

logger = logging.getLogger(__name__)

# each lost (vatin, slot) race means another ticket was stored, so this bounds retries
MAX_SLOT_ATTEMPTS = 5


def _unavailable(e: SQLAlchemyError) -> StoreUnavailable:
    # pool timeouts carry no DBAPI error
    return StoreUnavailable(str(getattr(e, "orig", None) or e))


class TicketStore:
    """Persistence of issued tickets.

    Every call opens its own session and closes it before returning, so a
    pooled connection is never held while the caller talks to the network.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def count_by_identity(self, vatin: str | None) -> int:
        if not vatin:
            return 0

        try:
            with self._session_factory() as db:
                count = _count(db, vatin)
        except SQLAlchemyError as e:
            raise _unavailable(e) from e

        logger.debug("vatin=%s holds %d tickets", vatin, count)
        return count

    def insert(self, ticket: Ticket, cap: int | None = None) -> Ticket:
        """Store ``ticket`` unless its identity already holds ``cap`` tickets.

        Count and insert run in one transaction and the ticket takes slot
        ``count + 1``. Two writers that read the same count collide on the
        unique (vatin, slot) constraint; the loser re-counts and tries again.

        A ticket whose idempotency key is already stored is not inserted
        again; the stored ticket is returned instead.
        """
        for _ in range(MAX_SLOT_ATTEMPTS):
            try:
                with self._session_factory() as db, db.begin():
                    if db.get(Ticket, ticket.id) is not None:
                        raise DuplicateId(ticket.id)

                    existing = _by_key(db, ticket.idempotency_key)
                    if existing is not None:
                        return existing

                    taken = _count(db, ticket.vatin)
                    if cap is not None and taken >= cap:
                        raise CapExceeded(ticket.vatin, cap)

                    ticket.slot = taken + 1
                    db.add(ticket)
                return ticket

            except IntegrityError as e:
                if self._exists(ticket.id):
                    raise DuplicateId(ticket.id) from e
                existing = self.get_by_idempotency_key(ticket.idempotency_key)
                if existing is not None:
                    return existing
                logger.info("slot race for ticket=%s, retrying", ticket.id)

            except SQLAlchemyError as e:
                raise _unavailable(e) from e

        raise StoreUnavailable("could not reserve a ticket slot")

    def get_by_id(self, ticket_id: str) -> Ticket:
        try:
            with self._session_factory() as db:
                t = db.get(Ticket, ticket_id)
        except SQLAlchemyError as e:
            raise _unavailable(e) from e

        if t is None:
            raise NotFound(ticket_id)
        return t

    def get_by_idempotency_key(self, key: str | None) -> Ticket | None:
        if not key:
            return None
        try:
            with self._session_factory() as db:
                return _by_key(db, key)
        except SQLAlchemyError as e:
            raise _unavailable(e) from e

    def _exists(self, ticket_id: str) -> bool:
        try:
            with self._session_factory() as db:
                return db.get(Ticket, ticket_id) is not None
        except SQLAlchemyError as e:
            raise _unavailable(e) from e


def _count(db: Session, vatin: str) -> int:
    return db.execute(select(func.count()).select_from(Ticket).where(Ticket.vatin == vatin)).scalar_one()


def _by_key(db: Session, key: str | None) -> Ticket | None:
    if not key:
        return None
    return db.execute(select(Ticket).where(Ticket.idempotency_key == key)).scalar_one_or_none()
