"""
Authentication utilities for the availability portal.
Provides password hashing, session management, and authentication dependencies.

NOTE: Uses bcrypt directly instead of passlib due to version compatibility issues.
"""

from datetime import datetime, timedelta
from typing import Optional
import logging
import secrets
import bcrypt

from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from .models import Teacher, get_db

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"
SESSION_TTL = timedelta(hours=24)

# Session storage (in-memory, one process)
active_sessions = {}


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against a hash."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError as e:
        logger.warning(f"Password verification error: {e}")
        return False


def create_session(teacher_id: str, role: str) -> str:
    """Create a new session and return the session token."""
    token = secrets.token_urlsafe(32)
    active_sessions[token] = {
        "subject": teacher_id,
        "role": role,
        "created_at": datetime.utcnow(),
        "last_activity": datetime.utcnow(),
    }
    return token


def get_session(token: str) -> Optional[dict]:
    """Get session data from token."""
    session = active_sessions.get(token)
    if session:
        session["last_activity"] = datetime.utcnow()

        if datetime.utcnow() - session["created_at"] > SESSION_TTL:
            delete_session(token)
            return None

    return session


def delete_session(token: str):
    """Delete a session."""
    active_sessions.pop(token, None)


def authenticate(email: str, password: str, db: Session) -> Optional[Teacher]:
    """Authenticate an account by email and password."""
    user = db.query(Teacher).filter_by(email=email.strip().lower()).first()
    if not user or not user.active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


# ==========================================
# PERMISSIONS
# ==========================================

def can_edit(user: Teacher, teacher_id: str) -> bool:
    """Schedulers may edit anyone's availability; teachers only their own."""
    return user.is_scheduler or user.id == teacher_id


def ensure_can_edit(user: Teacher, teacher_id: str) -> None:
    if not can_edit(user, teacher_id):
        logger.warning(f"{user.id} tried to access availability of {teacher_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized to modify this user"
        )


# ==========================================
# FASTAPI DEPENDENCIES
# ==========================================

async def get_current_user(request: Request, db: Session = Depends(get_db)) -> Teacher:
    """Get the currently authenticated user from session cookie."""
    session_token = request.cookies.get(SESSION_COOKIE)

    if not session_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = get_session(session_token)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(Teacher).filter_by(id=session["subject"]).first()
    if not user or not user.active:
        delete_session(session_token)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account not found or inactive"
        )

    return user


async def require_scheduler(current_user: Teacher = Depends(get_current_user)) -> Teacher:
    """Require that the current user is a scheduler."""
    if not current_user.is_scheduler:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Scheduler privileges required"
        )
    return current_user
