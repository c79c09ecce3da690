import logging
from jose import JWTError
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.auth import LoginRequest, TokenPair
from app.models.user import User, CONSOLE_ROLES
from app.core.security import verify_password, create_access_token, create_refresh_token, decode_token
from app.api.deps import console_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

def _tokens(user: User) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user.id, role=user.role),
        refresh_token=create_refresh_token(user.id),
    )

@router.post("/auth/login", response_model=TokenPair)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    if not email and not body.password:
        raise HTTPException(status_code=400, detail="Please enter both Admin ID and Admin Pass.")
    if not email:
        raise HTTPException(status_code=400, detail="Please enter your Admin ID.")
    if not body.password:
        raise HTTPException(status_code=400, detail="Please enter your Admin Pass.")
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise HTTPException(status_code=400, detail="Please enter a valid Admin ID.")

    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active or not verify_password(body.password, user.password_hash):
        logger.info("failed console login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid Admin ID or Admin Pass.")
    if user.role not in CONSOLE_ROLES:
        raise HTTPException(status_code=403, detail="This account cannot access the admin console.")
    return _tokens(user)


@router.post("/auth/refresh", response_model=TokenPair)
def refresh(refresh_token: str, db: Session = Depends(get_db)):
    try:
        payload = decode_token(refresh_token, expected_type="refresh")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    user_id = payload.get("sub")
    user = db.get(User, user_id)
    if not user or not user.is_active or user.role not in CONSOLE_ROLES:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return _tokens(user)

@router.get("/auth/me")
def me(me: User = Depends(console_user)):
    """Return current user info including role."""
    return {
        "id": me.id,
        "email": me.email,
        "fullName": me.full_name or "",
        "role": me.role,
    }
