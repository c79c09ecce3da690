import logging

from app.services.checkin_service import CheckInVerifier, VerificationOutcome

logger = logging.getLogger(__name__)


class ScanSession:
    """One scanning session at the front desk.

    Accepts a payload only while active and idle. After an outcome the session
    pauses until reset(), so a code still in front of the camera is not
    verified again while the result is on screen.
    """

    def __init__(self, verifier: CheckInVerifier):
        self.verifier = verifier
        self.active = True
        self.processing = False
        self.last_outcome: VerificationOutcome | None = None

    async def submit(self, payload: str) -> VerificationOutcome | None:
        """Verify `payload`, or return None when the session is not accepting scans."""
        if self.processing or not self.active:
            logger.debug("scan ignored (processing=%s active=%s)", self.processing, self.active)
            return None
        self.processing = True
        self.active = False
        try:
            outcome = await self.verifier.verify(payload)
        finally:
            self.processing = False
        self.last_outcome = outcome
        return outcome

    def reset(self) -> None:
        self.active = True
        self.last_outcome = None
