# app/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.v1.deps import get_current_user
from app.api.v1.serializers import user_to_dict
from app.core.errors import ConflictError, storage_guard
from app.core.security import create_access_token, hash_password, verify_password
from app.models.goal import utc_now
from app.models.user import Role, User
from app.schemas.auth import InviteSignupIn, LoginRequest, RegisterIn
from app.services.invites import invite_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_token(user: User, response: Response) -> str:
    """Create an access token and also set it as the HttpOnly accessToken cookie."""
    token = create_access_token(str(user.id), Role(user.role).value)
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    return token


@router.post("/register")
async def register(body: RegisterIn, response: Response):
    """
    Register a new IC account.

    Args:
        body: email (unique, case-insensitive), password (min 6 chars), optional name

    Returns:
        dict: {"success": True, "accessToken": str, "user": User}

    Raises:
        ConflictError (409): Email already registered
    """
    email = User.normalize_email(body.email)
    if await User.filter(email=email).exists():
        raise ConflictError("User with this email already exists")
    with storage_guard("Failed to register user"):
        user = await User.create(
            email=email,
            name=body.name or None,
            password_hash=hash_password(body.password),
            role=Role.IC,
            is_active=True,
        )
    token = _issue_token(user, response)
    return {"success": True, "accessToken": token, "user": user_to_dict(user)}


@router.post("/login")
async def login(payload: LoginRequest, response: Response):
    """
    Authenticate user and create access token.

    The token is returned in the response body and also set as an HttpOnly
    cookie for browser-based clients. Pending (invited, not yet activated)
    accounts cannot log in.

    Raises:
        HTTPException (401): If credentials are invalid or the account is inactive
    """
    user = await User.get_or_none(email=User.normalize_email(payload.email))
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is not active")
    user.last_login_at = utc_now()
    await user.save(update_fields=["last_login_at"])
    token = _issue_token(user, response)
    return {"success": True, "accessToken": token, "user": user_to_dict(user)}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    return {"success": True, "user": user_to_dict(user)}


@router.post("/logout")
async def logout(response: Response):
    """
    Log out the current user by clearing the access token cookie.

    The JWT itself remains valid until it expires.
    """
    response.delete_cookie("accessToken")
    return {"success": True}


@router.get("/invite/{token}")
async def check_invite(token: str):
    """
    Check whether an invite token can still be used.

    Returns:
        dict: {"valid": True, "email": str, "role": str} or {"valid": False}
    """
    user = await invite_service.get_invite_by_token(token)
    if user is None:
        return {"valid": False}
    return {"valid": True, "email": user.email, "role": Role(user.role).value}


@router.post("/signup-invite")
async def signup_invite(body: InviteSignupIn, response: Response):
    """
    Complete an invite: set the password, activate the account and log in.

    Raises:
        ValidationError (400): Invalid or expired invite token
    """
    user = await invite_service.complete_invite_signup(body.token, body.password, body.name)
    user.last_login_at = utc_now()
    await user.save(update_fields=["last_login_at"])
    token = _issue_token(user, response)
    return {"success": True, "accessToken": token, "user": user_to_dict(user)}
