from typing import Any, Optional
from pydantic import BaseModel

class ScanIn(BaseModel):
    payload: str

class CheckInOut(BaseModel):
    ok: bool
    kind: Optional[str] = None
    message: str = ""
    reservation: Optional[dict[str, Any]] = None
