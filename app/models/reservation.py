from sqlalchemy import String, Integer, DateTime, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

STATUSES = ("pending", "confirmed", "cancelled", "checked-in")


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


class Reservation(Base):
    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    reservation_id: Mapped[str] = mapped_column(String(40), unique=True, index=True)  # printed in the QR payload

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, confirmed, cancelled, checked-in
    checked_in: Mapped[bool] = mapped_column(Boolean, default=False)
    check_in_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    # qr_data["verificationCode"] is canonical; qr_verification_code is the legacy flat copy
    qr_data: Mapped[dict] = mapped_column(JSON, nullable=True)
    qr_verification_code: Mapped[str] = mapped_column(String(64), nullable=True)

    user_id: Mapped[str] = mapped_column(String(36), nullable=True, index=True)
    user_full_name: Mapped[str] = mapped_column(String(200), default="")
    user_email: Mapped[str] = mapped_column(String(320), default="")

    accommodation_id: Mapped[str] = mapped_column(String(36), nullable=True, index=True)
    room: Mapped[dict] = mapped_column(JSON, nullable=True)  # snapshot of the booked accommodation
    is_whole_resort: Mapped[bool] = mapped_column(Boolean, default=False)

    date_str: Mapped[str] = mapped_column(String(40), default="")
    guests: Mapped[int] = mapped_column(Integer, default=1)
    day_hours: Mapped[str] = mapped_column(String(40), default="")
    overnight_hours: Mapped[str] = mapped_column(String(40), default="")

    payment_method: Mapped[str] = mapped_column(String(30), default="")
    total_amount: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_doc(self) -> dict:
        """Document shape the console and the check-in flow work with."""
        return {
            "id": self.id,
            "reservationId": self.reservation_id,
            "status": self.status,
            "checkedIn": bool(self.checked_in),
            "checkInTime": _iso(self.check_in_time),
            "qrData": self.qr_data,
            "qrVerificationCode": self.qr_verification_code,
            "userId": self.user_id,
            "userFullName": self.user_full_name,
            "userEmail": self.user_email,
            "accommodationId": self.accommodation_id,
            "room": self.room,
            "isWholeResort": bool(self.is_whole_resort),
            "date": self.date_str,
            "guests": self.guests,
            "dayHours": self.day_hours,
            "overnightHours": self.overnight_hours,
            "paymentMethod": self.payment_method,
            "totalAmount": self.total_amount,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
