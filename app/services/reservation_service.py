import secrets
import string
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.models.reservation import Reservation, STATUSES
from app.models.user import User
from app.services.audit_service import log_audit
from app.services.checkin_service import check_in_fields, is_checked_in, resolve_verification_code
from app.services.reservation_store import conditional_update

OPEN_STATUSES = ("pending", "confirmed")  # may still be cancelled or checked in
CODE_ALPHABET = string.ascii_uppercase + string.digits


class StatusConflict(Exception):
    """The reservation's current status does not allow the requested change."""


def list_reservations(db: Session, status: str = "all") -> list[Reservation]:
    query = db.query(Reservation)
    if status and status != "all":
        if status not in STATUSES:
            raise ValueError(f"unknown status filter: {status}")
        query = query.filter(Reservation.status == status)
    return query.order_by(Reservation.created_at.desc()).all()


def get_reservation(db: Session, record_id: str) -> Reservation:
    r = db.get(Reservation, record_id)
    if not r:
        raise LookupError("reservation not found")
    return r


def cancel_reservation(db: Session, record_id: str, actor: User) -> Reservation:
    r = get_reservation(db, record_id)
    previous = r.status
    if previous not in OPEN_STATUSES:
        raise StatusConflict(f"cannot cancel a {previous} reservation")
    if not conditional_update(db, r.id, {"status": "cancelled"}, expected_status=previous, commit=False):
        db.rollback()
        raise StatusConflict("reservation changed while cancelling")
    log_audit(db, actor, "reservation.cancel", "reservation", r.id, {"reservationId": r.reservation_id, "from": previous})
    db.commit()
    db.refresh(r)
    return r


def delete_reservation(db: Session, record_id: str, actor: User) -> None:
    r = get_reservation(db, record_id)
    log_audit(db, actor, "reservation.delete", "reservation", r.id, {"reservationId": r.reservation_id, "status": r.status})
    db.delete(r)
    db.commit()


def can_check_in(doc: dict) -> bool:
    return doc.get("status") in OPEN_STATUSES and not is_checked_in(doc)


def check_in_reservation(db: Session, record_id: str, actor: User) -> Reservation:
    """Manual check-in from the details view (no code scan)."""
    r = get_reservation(db, record_id)
    doc = r.to_doc()
    if not can_check_in(doc):
        raise StatusConflict("reservation cannot be checked in")
    fields = check_in_fields(datetime.now(timezone.utc))
    if not conditional_update(db, r.id, fields, expected_status=doc["status"], commit=False):
        db.rollback()
        raise StatusConflict("reservation changed while checking in")
    log_audit(db, actor, "reservation.check_in", "reservation", r.id, {"reservationId": r.reservation_id, "via": "manual"})
    db.commit()
    db.refresh(r)
    return r


def make_verification_code(length: int = 6) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def issue_verification_code(db: Session, record_id: str, actor: User) -> Reservation:
    """Give a code to a reservation that has none. Existing codes are never replaced."""
    r = get_reservation(db, record_id)
    if resolve_verification_code(r.to_doc()):
        raise StatusConflict("reservation already has a verification code")
    qr_data = dict(r.qr_data or {})
    qr_data.update({
        "reservationId": r.reservation_id,
        "verificationCode": make_verification_code(),
        "guestName": r.user_full_name,
        "room": (r.room or {}).get("name", ""),
        "date": r.date_str,
    })
    r.qr_data = qr_data
    r.updated_at = datetime.now(timezone.utc)
    log_audit(db, actor, "reservation.issue_code", "reservation", r.id, {"reservationId": r.reservation_id})
    db.commit()
    db.refresh(r)
    return r
