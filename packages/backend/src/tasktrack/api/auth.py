"""Auth API — registration, login, current user.

Learn: Routes for user authentication:
- POST /api/register → create a new user account
- POST /api/login → email/password → JWT access token
- GET /api/me → current user info (requires token)
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from tasktrack.auth.dependencies import CurrentIdentity, get_current_user
from tasktrack.auth.jwt import create_access_token
from tasktrack.schemas.user import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserRead,
)
from tasktrack.services.user_service import (
    DuplicateUserError,
    InvalidCredentialsError,
    UserService,
)
from tasktrack.store.base import CollectionStore
from tasktrack.store.providers import get_user_store

logger = structlog.get_logger()

router = APIRouter()


def _user_svc(store: CollectionStore = Depends(get_user_store)) -> UserService:
    return UserService(store)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(body: RegisterRequest, svc: UserService = Depends(_user_svc)):
    """Create a new user account."""
    try:
        await svc.register(
            name=body.name,
            last_name=body.last_name,
            email=body.email,
            password=body.password,
        )
    except DuplicateUserError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MessageResponse(message="User registered")


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, svc: UserService = Depends(_user_svc)):
    """Login with email and password → JWT access token."""
    try:
        user = await svc.authenticate(body.email, body.password)
    except InvalidCredentialsError as e:
        logger.info("auth.login_failed")
        raise HTTPException(status_code=401, detail=str(e))

    token = create_access_token(user["id"], user.get("name", ""))
    logger.info("auth.login", user_id=user["id"])
    return TokenResponse(token=token)


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Get the current authenticated user's info."""
    user = await svc.get_user(identity.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return UserRead(
        id=user["id"],
        name=user["name"],
        last_name=user.get("lastName"),
        email=user["email"],
        created_at=user.get("createdAt"),
    )
