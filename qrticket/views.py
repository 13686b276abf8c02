from dataclasses import dataclass
from datetime import datetime

from .qr import render_qr, verification_url
from .store import TicketStore


@dataclass(frozen=True)
class OwnerView:
    id: str
    first_name: str
    last_name: str
    vatin: str
    created_at: datetime
    verification_url: str
    qr_data_uri: str


@dataclass(frozen=True)
class ScanView:
    # shown to whoever scans the code, so no name or vatin
    id: str
    created_at: datetime


class TicketViews:
    def __init__(self, store: TicketStore, base_url: str):
        self.store = store
        self.base_url = base_url

    def owner_view(self, ticket_id: str) -> OwnerView:
        t = self.store.get_by_id(ticket_id)
        return OwnerView(
            id=t.id,
            first_name=t.first_name,
            last_name=t.last_name,
            vatin=t.vatin,
            created_at=t.created_at,
            verification_url=verification_url(t.id, self.base_url),
            qr_data_uri=render_qr(t.id, self.base_url),
        )

    def scan_view(self, ticket_id: str) -> ScanView:
        t = self.store.get_by_id(ticket_id)
        return ScanView(id=t.id, created_at=t.created_at)
