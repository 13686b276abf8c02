"""Failures raised by the issuance workflow and the ticket views.

Each error knows the HTTP status it maps to and the JSON payload returned to
the client, so the web layer needs a single exception handler.
"""


class TicketError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        # set when the external ticket already exists; retrying with this key is safe upstream
        self.reconciliation_key: str | None = None

    def payload(self) -> dict:
        data = {"error": self.message}
        if self.reconciliation_key:
            data["reconciliation_key"] = self.reconciliation_key
        return data


class ValidationFailed(TicketError):
    status_code = 400

    def __init__(self, missing: list[str]):
        super().__init__(f"Missing required fields: {', '.join(missing)}.")
        self.missing = missing


class CapExceeded(TicketError):
    status_code = 400

    def __init__(self, vatin: str, cap: int):
        super().__init__(f"{cap} tickets have already been issued for this vatin. No more can be generated.")
        self.vatin = vatin
        self.cap = cap


class AuthorizationFailed(TicketError):
    status_code = 502

    def __init__(self, reason: str):
        super().__init__(f"Could not authorize with the ticketing service: {reason}")


class ExternalIssuanceFailed(TicketError):
    status_code = 502

    def __init__(self, upstream_status: int | None, upstream_body: str):
        super().__init__("The ticketing service rejected the ticket.")
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body

    def payload(self) -> dict:
        return {
            **super().payload(),
            "upstream_status": self.upstream_status,
            "upstream_body": self.upstream_body,
        }


class StoreUnavailable(TicketError):
    status_code = 503

    def __init__(self, reason: str):
        super().__init__(f"Ticket storage is unavailable: {reason}")


class DuplicateId(TicketError):
    status_code = 500

    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket id {ticket_id} already exists.")
        self.ticket_id = ticket_id


class NotFound(TicketError):
    status_code = 404

    def __init__(self, ticket_id: str):
        super().__init__("Ticket not found.")
        self.ticket_id = ticket_id
