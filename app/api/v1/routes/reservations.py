from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import console_user
from app.models.user import User
from app.services import reservation_service as svc
from app.services.reservation_store import StoreUnavailable

router = APIRouter(tags=["reservations"])


def _get_or_404(db: Session, record_id: str):
    try:
        return svc.get_reservation(db, record_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")


@router.get("/reservations")
def list_reservations(status: str = "all", db: Session = Depends(get_db), user: User = Depends(console_user)):
    try:
        rows = svc.list_reservations(db, status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"total": len(rows), "items": [r.to_doc() for r in rows]}


@router.get("/reservations/{record_id}")
def reservation_detail(record_id: str, db: Session = Depends(get_db), user: User = Depends(console_user)):
    doc = _get_or_404(db, record_id).to_doc()
    doc["canCheckIn"] = svc.can_check_in(doc)
    return doc


@router.post("/reservations/{record_id}/cancel")
def cancel(record_id: str, db: Session = Depends(get_db), user: User = Depends(console_user)):
    _get_or_404(db, record_id)
    try:
        r = svc.cancel_reservation(db, record_id, user)
    except svc.StatusConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreUnavailable:
        raise HTTPException(status_code=503, detail="Failed to cancel reservation.")
    return {"ok": True, "message": "Reservation cancelled successfully", "reservation": r.to_doc()}


@router.delete("/reservations/{record_id}")
def delete(record_id: str, db: Session = Depends(get_db), user: User = Depends(console_user)):
    _get_or_404(db, record_id)
    svc.delete_reservation(db, record_id, user)
    return {"ok": True, "message": "Reservation deleted successfully"}


@router.post("/reservations/{record_id}/check-in")
def manual_check_in(record_id: str, db: Session = Depends(get_db), user: User = Depends(console_user)):
    _get_or_404(db, record_id)
    try:
        r = svc.check_in_reservation(db, record_id, user)
    except svc.StatusConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreUnavailable:
        raise HTTPException(status_code=503, detail="Failed to update check-in.")
    return {"ok": True, "message": "Guest checked in successfully!", "reservation": r.to_doc()}


@router.post("/reservations/{record_id}/verification-code")
def issue_code(record_id: str, db: Session = Depends(get_db), user: User = Depends(console_user)):
    _get_or_404(db, record_id)
    try:
        r = svc.issue_verification_code(db, record_id, user)
    except svc.StatusConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"ok": True, "reservationId": r.reservation_id, "qrData": r.qr_data}
