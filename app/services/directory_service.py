from sqlalchemy.orm import Session

from app.models.user import User
from app.services.audit_service import log_audit

# Console filter key -> (role, type label shown in the directory)
FILTERS = {
    "admins": ("admin", "admin"),
    "staff": ("staff", "staff"),
    "users": ("customer", "user"),
}
TYPE_BY_ROLE = {role: label for role, label in FILTERS.values()}
DELETABLE_TYPES = ("user",)


def directory_entry(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "fullName": u.full_name,
        "phoneNumber": u.phone_number,
        "type": TYPE_BY_ROLE.get(u.role, u.role),
        "isActive": u.is_active,
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }


def _by_role(db: Session, role: str) -> list[User]:
    return db.query(User).filter(User.role == role).order_by(User.created_at.desc()).all()


def list_directory(db: Session, filter: str = "all") -> list[User]:
    """Admins, then staff, then customers for "all"; each group newest first."""
    if filter == "all":
        return [u for key in ("admins", "staff", "users") for u in _by_role(db, FILTERS[key][0])]
    if filter not in FILTERS:
        raise ValueError(f"unknown directory filter: {filter}")
    return _by_role(db, FILTERS[filter][0])


def get_account(db: Session, user_id: str) -> User:
    u = db.get(User, user_id)
    if not u:
        raise LookupError("account not found")
    return u


def delete_account(db: Session, user_id: str, actor: User) -> None:
    u = get_account(db, user_id)
    if TYPE_BY_ROLE.get(u.role) not in DELETABLE_TYPES:
        raise PermissionError("You can only delete customer accounts. Staff and admin accounts require higher permissions.")
    log_audit(db, actor, "user.delete", "user", u.id, {"email": u.email})
    db.delete(u)
    db.commit()
