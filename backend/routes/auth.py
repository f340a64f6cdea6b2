"""
Authentication endpoints for login, logout, and the current user.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from sqlalchemy.orm import Session
from pydantic import BaseModel

from backend.models import Teacher, get_db
from backend.auth import (
    SESSION_COOKIE,
    SESSION_TTL,
    authenticate,
    create_session,
    delete_session,
    get_current_user,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ==========================================
# PYDANTIC MODELS
# ==========================================

class LoginRequest(BaseModel):
    """Login credentials."""
    email: str
    password: str


class UserInfo(BaseModel):
    """Who is logged in and what they may do."""
    id: str
    name: str
    email: str
    role: str


# ==========================================
# ENDPOINTS
# ==========================================

@router.post("/login", response_model=UserInfo)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Authenticate by email and password and create a session.
    Returns a session cookie.
    """
    user = authenticate(credentials.email, credentials.password, db)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    session_token = create_session(user.id, user.role)

    # Set session cookie (httponly for security)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_token,
        httponly=True,
        max_age=int(SESSION_TTL.total_seconds()),
        samesite="lax"
    )

    return UserInfo(id=user.id, name=user.name, email=user.email, role=user.role)


@router.post("/logout")
async def logout(request: Request, response: Response):
    """
    Logout current user and destroy session.
    """
    session_token = request.cookies.get(SESSION_COOKIE)

    if session_token:
        delete_session(session_token)

    response.delete_cookie(SESSION_COOKIE)

    return {"message": "Logout successful"}


@router.get("/me", response_model=UserInfo)
async def get_current_user_info(
    current_user: Teacher = Depends(get_current_user)
):
    return UserInfo(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        role=current_user.role,
    )
