from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.security import decode_token
from app.models.user import User, CONSOLE_ROLES
from app.services.checkin_service import CheckInVerifier
from app.services.reservation_store import SqlReservationStore

bearer = HTTPBearer(auto_error=False)

def user_from_token(db: Session, token: str) -> User | None:
    try:
        payload = decode_token(token)
    except JWTError:
        return None
    user_id = payload.get("sub")
    user = db.get(User, user_id) if user_id else None
    if not user or not user.is_active:
        return None
    return user

def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = user_from_token(db, creds.credentials)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token or inactive user")
    return user

def require_roles(*roles: str):
    def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _guard

console_user = require_roles(*CONSOLE_ROLES)

def get_reservation_store(db: Session = Depends(get_db)) -> SqlReservationStore:
    return SqlReservationStore(db)

def get_checkin_verifier(store: SqlReservationStore = Depends(get_reservation_store)) -> CheckInVerifier:
    return CheckInVerifier(store)
