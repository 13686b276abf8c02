from datetime import datetime

from sqlalchemy import String, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    vatin: Mapped[str] = mapped_column(String, index=True)
    first_name: Mapped[str] = mapped_column("firstname", String)
    last_name: Mapped[str] = mapped_column("lastname", String)
    created_at: Mapped[datetime] = mapped_column("createdat", DateTime(timezone=True))
    # position of this ticket among the identity's tickets, 1..cap
    slot: Mapped[int] = mapped_column(Integer)
    # key sent to the ticketing API; a replayed request finds its ticket by it
    idempotency_key: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)

    __table_args__ = (UniqueConstraint("vatin", "slot", name="uniq_vatin_slot"),)
