from sqlalchemy.orm import Session

from app.models.accommodation import Accommodation, TYPES, STATUSES
from app.models.user import User
from app.services.audit_service import log_audit


def accommodation_out(a: Accommodation) -> dict:
    return {
        "id": a.id,
        "name": a.name,
        "type": a.type,
        "packageType": a.package_type,
        "description": a.description,
        "capacity": a.capacity,
        "dayPrice": a.day_price,
        "overnightPrice": a.overnight_price,
        "wholeResortPrice": a.whole_resort_price,
        "amenities": list(a.amenities or []),
        "features": list(a.features or []),
        "image": a.image,
        "status": a.status,
        "available": a.status == "Active",
    }


def list_accommodations(db: Session, type: str = "all") -> list[Accommodation]:
    query = db.query(Accommodation)
    if type and type != "all":
        if type not in TYPES:
            raise ValueError(f"unknown accommodation type: {type}")
        query = query.filter(Accommodation.type == type)
    return query.order_by(Accommodation.name.asc()).all()


def get_accommodation(db: Session, accommodation_id: str) -> Accommodation:
    a = db.get(Accommodation, accommodation_id)
    if not a:
        raise LookupError("accommodation not found")
    return a


def set_status(db: Session, accommodation_id: str, status: str, actor: User) -> Accommodation:
    if status not in STATUSES:
        raise ValueError("status must be Active or Inactive")
    a = get_accommodation(db, accommodation_id)
    previous = a.status
    a.status = status
    log_audit(db, actor, "accommodation.status", "accommodation", a.id, {"from": previous, "to": status})
    db.commit()
    db.refresh(a)
    return a
