import logging
import uuid

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from app.db.session import SessionLocal
from app.core.security import hash_password
from app.models.user import User
from app.models.accommodation import Accommodation

logger = logging.getLogger(__name__)

ACCOMMODATIONS = [
    dict(name="Deluxe Room", type="room", package_type="day/overnight", capacity=4,
         day_price=2500, overnight_price=3500, amenities=["Air conditioning", "Private bathroom", "TV"]),
    dict(name="Family Room", type="room", package_type="day/overnight", capacity=8,
         day_price=4000, overnight_price=5500, amenities=["Air conditioning", "Private bathroom", "Mini fridge"]),
    dict(name="Kubo Cottage", type="cottage", package_type="day", capacity=10,
         day_price=800, overnight_price=1200, amenities=["Picnic table", "Grill area"]),
    dict(name="Whole Resort", type="whole", package_type="exclusive", capacity=80,
         whole_resort_price=35000, amenities=["All pools", "All rooms", "Function hall"]),
]


def ensure_user(db: Session, email: str, password: str, role: str, name: str):
    u = db.query(User).filter(User.email == email).first()
    if u:
        return
    db.add(
        User(
            id=str(uuid.uuid4()),
            email=email,
            full_name=name,
            role=role,
            password_hash=hash_password(password),
            is_active=True,
        )
    )
    db.commit()


def ensure_accommodation(db: Session, **fields):
    if db.query(Accommodation).filter(Accommodation.name == fields["name"]).first():
        return
    db.add(Accommodation(id=str(uuid.uuid4()), status="Active", **fields))
    db.commit()


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        ensure_user(db, "admin@donelmers.ph", "admin12345", "admin", "Admin")
        ensure_user(db, "frontdesk@donelmers.ph", "staff12345", "staff", "Front Desk")

        for acc in ACCOMMODATIONS:
            ensure_accommodation(db, **acc)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run()
