from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import console_user
from app.models.user import User
from app.services import directory_service as svc

router = APIRouter(tags=["directory"])


@router.get("/directory")
def list_directory(filter: str = "all", db: Session = Depends(get_db), user: User = Depends(console_user)):
    try:
        rows = svc.list_directory(db, filter)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"total": len(rows), "items": [svc.directory_entry(u) for u in rows]}


@router.get("/directory/{user_id}")
def account_detail(user_id: str, db: Session = Depends(get_db), user: User = Depends(console_user)):
    try:
        return svc.directory_entry(svc.get_account(db, user_id))
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")


@router.delete("/directory/{user_id}")
def delete_account(user_id: str, db: Session = Depends(get_db), user: User = Depends(console_user)):
    try:
        svc.delete_account(db, user_id, user)
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"ok": True, "message": "Account deleted successfully"}
