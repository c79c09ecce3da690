from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import console_user
from app.models.user import User
from app.schemas.accommodation import AccommodationStatusIn
from app.services import accommodation_service as svc

router = APIRouter(tags=["accommodations"])


@router.get("/accommodations")
def list_accommodations(type: str = "all", db: Session = Depends(get_db), user: User = Depends(console_user)):
    try:
        rows = svc.list_accommodations(db, type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"total": len(rows), "items": [svc.accommodation_out(a) for a in rows]}


@router.get("/accommodations/{accommodation_id}")
def accommodation_detail(accommodation_id: str, db: Session = Depends(get_db), user: User = Depends(console_user)):
    try:
        return svc.accommodation_out(svc.get_accommodation(db, accommodation_id))
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")


@router.patch("/accommodations/{accommodation_id}/status")
def update_status(accommodation_id: str, body: AccommodationStatusIn,
                  db: Session = Depends(get_db), user: User = Depends(console_user)):
    try:
        a = svc.set_status(db, accommodation_id, body.status, user)
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "message": f"Room status updated to {a.status}", "accommodation": svc.accommodation_out(a)}
