"""QR check-in verification.

A scanned payload is JSON carrying ``reservationId`` and ``verificationCode``.
The verifier looks the reservation up (retrying briefly, since the record may
have been written moments before the QR was generated), gates on status,
compares the code verbatim and commits the ``checked-in`` transition. Every
failure comes back as a tagged outcome; nothing is raised to the caller.

The code is an opaque shared secret stored on the reservation at QR
generation time. It is not bound to the reservation's other fields, so a
leaked code is enough to check a guest in.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable

from app.core.config import settings
from app.services.reservation_store import ReservationStore, StoreUnavailable

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    INVALID_FORMAT = "InvalidFormat"
    MISSING_FIELDS = "MissingFields"
    NOT_FOUND = "NotFound"
    CANCELLED = "Cancelled"
    PENDING_CONFIRMATION = "PendingConfirmation"
    ALREADY_CHECKED_IN = "AlreadyCheckedIn"
    MISCONFIGURED_CODE = "MisconfiguredCode"
    CODE_MISMATCH = "CodeMismatch"
    STORE_UNAVAILABLE = "StoreUnavailable"
    CONCURRENT_CHECK_IN = "ConcurrentCheckIn"


MESSAGES = {
    OutcomeKind.INVALID_FORMAT: "This QR code is not valid.\nPlease scan a valid reservation QR code.",
    OutcomeKind.MISSING_FIELDS: "This QR code is missing required information.\nIt may not be from our system.",
    OutcomeKind.NOT_FOUND: "Reservation not found in our system.\nPlease ensure the QR code was generated properly.",
    OutcomeKind.CANCELLED: "This reservation has been cancelled.\nPlease contact the front desk for assistance.",
    OutcomeKind.PENDING_CONFIRMATION: "This reservation is still pending confirmation.\nPlease wait for confirmation before checking in.",
    OutcomeKind.ALREADY_CHECKED_IN: "This reservation has already been checked in.\nCannot check in again.",
    OutcomeKind.MISCONFIGURED_CODE: "QR code not properly configured.\nPlease regenerate the QR code from the admin panel.",
    OutcomeKind.CODE_MISMATCH: "Verification code mismatch.\nThis may be an old or regenerated QR code.",
    OutcomeKind.STORE_UNAVAILABLE: "Scanning failed.\nPlease try again or contact support.",
    OutcomeKind.CONCURRENT_CHECK_IN: "This reservation was updated while verifying.\nPlease scan again.",
}
SUCCESS_MESSAGE = "Reservation verified successfully!\nRedirecting to details..."


@dataclass
class VerificationOutcome:
    ok: bool
    kind: OutcomeKind | None = None
    message: str = ""
    reservation: dict[str, Any] | None = None

    @classmethod
    def success(cls, reservation: dict[str, Any]) -> "VerificationOutcome":
        return cls(ok=True, message=SUCCESS_MESSAGE, reservation=reservation)

    @classmethod
    def failure(cls, kind: OutcomeKind) -> "VerificationOutcome":
        return cls(ok=False, kind=kind, message=MESSAGES[kind])

    def as_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "message": self.message, "reservation": self.reservation}
        return {"ok": False, "kind": self.kind.value, "message": self.message}


def resolve_verification_code(reservation: dict[str, Any]) -> str | None:
    """Nested qrData.verificationCode first, then the legacy flat field."""
    qr_data = reservation.get("qrData") or {}
    code = qr_data.get("verificationCode") if isinstance(qr_data, dict) else None
    return code or reservation.get("qrVerificationCode") or None


def is_checked_in(reservation: dict[str, Any]) -> bool:
    return reservation.get("status") == "checked-in" or reservation.get("checkedIn") is True


def check_in_fields(now: datetime) -> dict[str, Any]:
    return {"status": "checked-in", "checkedIn": True, "checkInTime": now}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckInVerifier:
    def __init__(
        self,
        store: ReservationStore,
        *,
        attempts: int | None = None,
        retry_delay: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.attempts = attempts if attempts is not None else settings.CHECKIN_LOOKUP_ATTEMPTS
        self.retry_delay = retry_delay if retry_delay is not None else settings.CHECKIN_RETRY_DELAY_SECONDS
        self.sleep = sleep
        self.clock = clock

    async def _lookup(self, reservation_id: str) -> tuple[dict[str, Any] | None, bool]:
        """Return (reservation, last_attempt_failed)."""
        failed = False
        for attempt in range(1, self.attempts + 1):
            try:
                reservation = await self.store.find_by_business_id(reservation_id)
                failed = False
            except StoreUnavailable as e:
                logger.warning("lookup of %s failed (attempt %d/%d): %s", reservation_id, attempt, self.attempts, e)
                reservation, failed = None, True
            if reservation is not None:
                return reservation, False
            if attempt < self.attempts:
                logger.info("reservation %s not found, retrying (%d/%d)", reservation_id, attempt, self.attempts)
                await self.sleep(self.retry_delay)
        return None, failed

    async def verify(self, payload: str | bytes) -> VerificationOutcome:
        try:
            parsed = json.loads(payload)
        except (TypeError, ValueError, RecursionError):
            logger.info("rejected scan: payload is not JSON")
            return VerificationOutcome.failure(OutcomeKind.INVALID_FORMAT)

        if not isinstance(parsed, dict):
            return VerificationOutcome.failure(OutcomeKind.MISSING_FIELDS)
        reservation_id = parsed.get("reservationId")
        scanned_code = parsed.get("verificationCode")
        if not (isinstance(reservation_id, str) and reservation_id) or not (isinstance(scanned_code, str) and scanned_code):
            return VerificationOutcome.failure(OutcomeKind.MISSING_FIELDS)

        reservation, store_failed = await self._lookup(reservation_id)
        if reservation is None:
            if store_failed:
                return VerificationOutcome.failure(OutcomeKind.STORE_UNAVAILABLE)
            logger.info("reservation %s not found after %d attempts", reservation_id, self.attempts)
            return VerificationOutcome.failure(OutcomeKind.NOT_FOUND)

        status = reservation.get("status")
        if status == "cancelled":
            return VerificationOutcome.failure(OutcomeKind.CANCELLED)
        if status == "pending":
            return VerificationOutcome.failure(OutcomeKind.PENDING_CONFIRMATION)
        if is_checked_in(reservation):
            return VerificationOutcome.failure(OutcomeKind.ALREADY_CHECKED_IN)
        if status != "confirmed":
            # only confirmed -> checked-in; the commit below is gated on it
            logger.warning("reservation %s has unexpected status %r", reservation_id, status)
            return VerificationOutcome.failure(OutcomeKind.PENDING_CONFIRMATION)

        stored_code = resolve_verification_code(reservation)
        if not stored_code:
            logger.error("reservation %s has no stored verification code", reservation_id)
            return VerificationOutcome.failure(OutcomeKind.MISCONFIGURED_CODE)
        if scanned_code != stored_code:
            logger.info("verification code mismatch for %s", reservation_id)
            return VerificationOutcome.failure(OutcomeKind.CODE_MISMATCH)

        try:
            committed = await self.store.update(reservation["id"], check_in_fields(self.clock()), expected_status=status)
        except StoreUnavailable as e:
            logger.error("check-in write for %s failed: %s", reservation_id, e)
            return VerificationOutcome.failure(OutcomeKind.STORE_UNAVAILABLE)
        if not committed:
            logger.warning("reservation %s changed before check-in could commit", reservation_id)
            return VerificationOutcome.failure(OutcomeKind.CONCURRENT_CHECK_IN)

        logger.info("reservation %s checked in", reservation_id)
        return VerificationOutcome.success(reservation)
