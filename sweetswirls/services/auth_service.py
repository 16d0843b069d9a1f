import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from sqlalchemy.orm import Session

from sweetswirls.config import settings
from sweetswirls.models.user import ActivityLog, User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    ("Admin User", "admin@sweetswirls.com", "admin123", UserRole.ADMIN),
    ("Production Lead", "production@sweetswirls.com", "production123", UserRole.PRODUCTION_LEAD),
    ("Shift Lead", "shift@sweetswirls.com", "shift123", UserRole.SHIFT_LEAD),
    ("Team Member", "team@sweetswirls.com", "team123", UserRole.TEAM_MEMBER),
]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False


def create_access_token(user: User) -> str:
    payload = {
        "sub": user.id,
        "email": user.email,
        "role": UserRole(user.role).value,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except (jwt.ExpiredSignatureError, jwt.InvalidTokenError):
        return None


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = db.query(User).filter(User.email == _normalize_email(email), User.is_active == True).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        return None
    logger.info("User %s logged in", user.email)
    return user


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, name: str, email: str, password: str, role: UserRole = UserRole.TEAM_MEMBER) -> User:
    email = _normalize_email(email)
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise ValueError(f"Email '{email}' is already registered")
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session, role: UserRole | None = None) -> list[User]:
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    return q.order_by(User.created_at.desc(), User.name).all()


def update_role(db: Session, user_id: str, role: UserRole) -> User | None:
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    user.role = role
    db.commit()
    db.refresh(user)
    return user


def set_active(db: Session, user_id: str, active: bool, acting_user_id: str | None = None) -> User | None:
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    if not active and user.id == acting_user_id:
        raise ValueError("You cannot deactivate your own account")
    user.is_active = active
    db.commit()
    db.refresh(user)
    return user


def ensure_default_users(db: Session) -> int:
    """Create one account per role if the users table is empty."""
    if db.query(User).count() > 0:
        return 0
    for name, email, password, role in DEFAULT_USERS:
        create_user(db, name=name, email=email, password=password, role=role)
    logger.info("Seeded %d default users", len(DEFAULT_USERS))
    return len(DEFAULT_USERS)


# Activity logging

def log_activity(db: Session, user_id: str, email: str, action: str, detail: str = "", ip: str = "") -> None:
    entry = ActivityLog(
        user_id=user_id,
        email=email,
        action=action,
        detail=detail,
        ip_address=ip,
    )
    db.add(entry)
    db.commit()


def get_activity_logs(db: Session, limit: int = 100, user_id: str | None = None) -> list[ActivityLog]:
    q = db.query(ActivityLog)
    if user_id:
        q = q.filter(ActivityLog.user_id == user_id)
    return q.order_by(ActivityLog.created_at.desc()).limit(limit).all()
