"""In-memory bookkeeping of push tickets issued during one dispatch cycle."""

from __future__ import annotations


class TicketTracker:
    """Map gateway ticket ids to the notification record they belong to.

    A tracker lives only as long as the dispatch cycle and its receipt check.
    Nothing is persisted: tickets still pending when the process stops are
    never reconciled.
    """

    def __init__(self) -> None:
        self._records_by_ticket: dict[str, int] = {}
        self._tracked_records: set[int] = set()

    def register(self, ticket_id: str, record_id: int) -> None:
        current = self._records_by_ticket.get(ticket_id)
        if current is not None and current != record_id:
            msg = f"Ticket {ticket_id} already belongs to notification {current}"
            raise ValueError(msg)
        if current is None and record_id in self._tracked_records:
            msg = f"Notification {record_id} already has a pending ticket"
            raise ValueError(msg)
        self._records_by_ticket[ticket_id] = record_id
        self._tracked_records.add(record_id)

    def get(self, ticket_id: str) -> int | None:
        return self._records_by_ticket.get(ticket_id)

    def pop(self, ticket_id: str) -> int | None:
        """Stop tracking ``ticket_id`` and return its record id."""

        record_id = self._records_by_ticket.pop(ticket_id, None)
        if record_id is not None:
            self._tracked_records.discard(record_id)
        return record_id

    def ticket_ids(self) -> list[str]:
        return list(self._records_by_ticket)

    def __contains__(self, ticket_id: object) -> bool:
        return ticket_id in self._records_by_ticket

    def __len__(self) -> int:
        return len(self._records_by_ticket)

    def __repr__(self) -> str:
        return f"TicketTracker(pending={len(self)})"


__all__ = ["TicketTracker"]
