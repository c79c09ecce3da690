import copy
import json
import unittest
import uuid
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.main import app
from app.core.security import create_access_token, hash_password
from app.db.session import Base, SessionLocal, engine
from app.models.accommodation import Accommodation
from app.models.reservation import Reservation
from app.models.user import User
from app.services.reservation_store import StoreUnavailable

PAYLOAD = json.dumps({"reservationId": "R-1001", "verificationCode": "AB12CD"})


class FakeReservationStore:
    """In-memory store keyed by record id, with call counters."""

    def __init__(self, *docs, visible_after=0, fail_lookups=0, fail_writes=False):
        self.docs = {d["id"]: copy.deepcopy(d) for d in docs}
        self.lookups = 0
        self.writes = []
        self.visible_after = visible_after  # lookups that miss before records show up
        self.fail_lookups = fail_lookups
        self.fail_writes = fail_writes

    async def find_by_business_id(self, reservation_id):
        self.lookups += 1
        if self.lookups <= self.fail_lookups:
            raise StoreUnavailable("backend timeout")
        if self.lookups <= self.visible_after:
            return None
        for doc in self.docs.values():
            if doc.get("reservationId") == reservation_id:
                return copy.deepcopy(doc)
        return None

    async def update(self, record_id, fields, expected_status=None):
        if self.fail_writes:
            raise StoreUnavailable("write rejected")
        doc = self.docs.get(record_id)
        if doc is None or (expected_status is not None and doc.get("status") != expected_status):
            return False
        self.writes.append((record_id, dict(fields)))
        doc.update(fields)
        return True


def reservation(**overrides):
    doc = {
        "id": "doc-1",
        "reservationId": "R-1001",
        "status": "confirmed",
        "checkedIn": False,
        "qrData": {"verificationCode": "AB12CD"},
        "userFullName": "Maria Santos",
    }
    doc.update(overrides)
    return doc


class ApiTestCase(unittest.TestCase):
    """Fresh in-memory schema, an admin and a staff account per test."""

    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()
        self.client = TestClient(app)
        self.admin = self.make_user("admin@donelmers.ph", "admin", password="admin12345")
        self.staff = self.make_user("frontdesk@donelmers.ph", "staff", password="staff12345")

    def tearDown(self):
        app.dependency_overrides.clear()
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def make_user(self, email, role, password="secret123", age_minutes=0, **fields):
        u = User(
            id=str(uuid.uuid4()),
            email=email,
            full_name=fields.pop("full_name", email.split("@")[0].title()),
            role=role,
            password_hash=hash_password(password),
            is_active=fields.pop("is_active", True),
            created_at=datetime.now(timezone.utc) - timedelta(minutes=age_minutes),
            **fields,
        )
        self.db.add(u)
        self.db.commit()
        return u

    def headers(self, user=None):
        user = user or self.staff
        return {"Authorization": f"Bearer {create_access_token(user.id, role=user.role)}"}

    def make_reservation(self, reservation_id="R-1001", status="confirmed", code="AB12CD", age_minutes=0, **fields):
        r = Reservation(
            id=str(uuid.uuid4()),
            reservation_id=reservation_id,
            status=status,
            checked_in=fields.pop("checked_in", status == "checked-in"),
            qr_data=fields.pop("qr_data", {"verificationCode": code} if code else None),
            user_full_name=fields.pop("user_full_name", "Maria Santos"),
            room=fields.pop("room", {"name": "Deluxe Room", "type": "room"}),
            created_at=datetime.now(timezone.utc) - timedelta(minutes=age_minutes),
            **fields,
        )
        self.db.add(r)
        self.db.commit()
        return r

    def make_accommodation(self, name, type="room", status="Active", **fields):
        a = Accommodation(id=str(uuid.uuid4()), name=name, type=type, status=status, **fields)
        self.db.add(a)
        self.db.commit()
        return a

    def reload(self, model, pk):
        self.db.expire_all()
        return self.db.get(model, pk)
