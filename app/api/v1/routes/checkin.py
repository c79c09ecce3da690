import json
import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.db.session import get_db
from app.api.deps import console_user, get_checkin_verifier, user_from_token
from app.models.user import User, CONSOLE_ROLES
from app.schemas.checkin import ScanIn, CheckInOut
from app.services.audit_service import log_audit
from app.services.checkin_service import CheckInVerifier, VerificationOutcome
from app.services.scanner import ScanSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["checkin"])


def _audit_check_in(db: Session, user: User, outcome: VerificationOutcome) -> None:
    r = outcome.reservation or {}
    log_audit(db, user, "reservation.check_in", "reservation", r.get("id", ""), {"reservationId": r.get("reservationId"), "via": "qr"})
    db.commit()


async def _after_scan(db: Session, user: User, outcome: VerificationOutcome) -> dict:
    if outcome.ok:
        await run_in_threadpool(_audit_check_in, db, user, outcome)
    return outcome.as_dict()


@router.post("/checkin/scan", response_model=CheckInOut)
async def scan(body: ScanIn,
               verifier: CheckInVerifier = Depends(get_checkin_verifier),
               db: Session = Depends(get_db),
               user: User = Depends(console_user)):
    """Verify one decoded QR payload. Rejections are returned as outcomes, not HTTP errors."""
    outcome = await verifier.verify(body.payload)
    return await _after_scan(db, user, outcome)


@router.websocket("/checkin/ws")
async def scan_session(websocket: WebSocket, token: str = "",
                       verifier: CheckInVerifier = Depends(get_checkin_verifier),
                       db: Session = Depends(get_db)):
    """Live scanning session.

    Client sends {"type": "scan", "data": "..."} per decoded code and
    {"type": "reset"} once the previous result has been dismissed.
    """
    user = await run_in_threadpool(user_from_token, db, token)
    if not user or user.role not in CONSOLE_ROLES:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()
    session = ScanSession(verifier)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                msg = None
            if not isinstance(msg, dict):
                await websocket.send_json({"error": "expected a JSON object"})
                continue

            if msg.get("type") == "reset":
                session.reset()
                await websocket.send_json({"ready": True})
            elif msg.get("type") == "scan":
                outcome = await session.submit(str(msg.get("data", "")))
                if outcome is None:
                    await websocket.send_json({"ignored": True})
                else:
                    await websocket.send_json(await _after_scan(db, user, outcome))
            else:
                await websocket.send_json({"error": "unknown message type"})
    except WebSocketDisconnect:
        logger.info("scan session closed for %s", user.email)
