"""Reservation Store: the check-in verifier's view of the reservations table.

The verifier only needs point lookups by business id and field updates by
record id. Both are async so the verifier can be driven by any backend; the
SQL implementation runs the blocking SQLAlchemy calls in Starlette's
threadpool.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.models.reservation import Reservation

logger = logging.getLogger(__name__)

# Document keys the store accepts in update(), mapped to table columns.
FIELD_COLUMNS = {
    "status": "status",
    "checkedIn": "checked_in",
    "checkInTime": "check_in_time",
    "updatedAt": "updated_at",
}


class StoreUnavailable(Exception):
    """The backend could not be reached or rejected the operation."""


class ReservationStore(Protocol):
    async def find_by_business_id(self, reservation_id: str) -> dict[str, Any] | None:
        ...

    async def update(self, record_id: str, fields: dict[str, Any],
                     expected_status: str | None = None) -> bool:
        """Apply `fields`; when `expected_status` is given, only if the record still has it.

        Returns False when the record is gone or the precondition failed.
        """
        ...


def conditional_update(db: Session, record_id: str, fields: dict[str, Any],
                       expected_status: str | None = None, commit: bool = True) -> bool:
    """UPDATE by record id, gated on `expected_status` when given.

    With commit=False the write stays in the session's transaction so the
    caller can stage an audit row next to it.
    """
    try:
        values = {FIELD_COLUMNS[k]: v for k, v in fields.items()}
    except KeyError as e:
        raise ValueError(f"field not writable: {e.args[0]}") from None
    values.setdefault("updated_at", datetime.now(timezone.utc))

    stmt = update(Reservation).where(Reservation.id == record_id)
    if expected_status is not None:
        stmt = stmt.where(Reservation.status == expected_status)
    try:
        result = db.execute(stmt.values(**values))
        if commit:
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("reservation update %s failed: %s", record_id, str(e)[:200])
        raise StoreUnavailable(str(e)[:200]) from e
    return result.rowcount == 1


class SqlReservationStore:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, reservation_id: str) -> dict[str, Any] | None:
        try:
            r = self.db.query(Reservation).filter(Reservation.reservation_id == reservation_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(str(e)[:200]) from e
        return r.to_doc() if r else None

    async def find_by_business_id(self, reservation_id: str) -> dict[str, Any] | None:
        return await run_in_threadpool(self._find, reservation_id)

    async def update(self, record_id: str, fields: dict[str, Any],
                     expected_status: str | None = None) -> bool:
        return await run_in_threadpool(conditional_update, self.db, record_id, fields, expected_status)
