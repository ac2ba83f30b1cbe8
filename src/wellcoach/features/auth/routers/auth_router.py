"""Authentication actions: sign-up, sign-in, sign-out."""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse

from ....config.settings import WellcoachSettings
from ....core.exceptions.auth import IdentityProviderError, InvalidCredentialsError
from ..adapters.client_factory import IdentityClientFactory
from ..dependencies import (
    get_app_settings,
    get_client_factory,
    get_current_user,
    get_profile_store,
    get_reconciliation_sink,
    session_cookies,
)
from ..entities.identity import SignupRequest
from ..entities.protocols import ProfileStoreProtocol, ReconciliationSinkProtocol
from ..entities.session import AuthenticatedUser
from ..models.responses import SessionResponse, UserResponse
from ..services.signup_saga import SignupSaga

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

GENERIC_SIGNUP_FAILURE = "Something went wrong while creating your account. Please try again later."


def _redirect(path: str, message: Optional[str] = None) -> RedirectResponse:
    """See-other redirect carrying an optional short user-facing message."""
    url = f"{path}?{urlencode({'message': message})}" if message else path
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def _safe_next(next_path: Optional[str], default: str) -> str:
    """Only follow same-site relative paths."""
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return default


@router.post("/signup")
async def signup(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    client_factory: IdentityClientFactory = Depends(get_client_factory),
    profile_store: ProfileStoreProtocol = Depends(get_profile_store),
    reconciliation_sink: ReconciliationSinkProtocol = Depends(get_reconciliation_sink),
    settings: WellcoachSettings = Depends(get_app_settings),
):
    """Create an account and its profile, then sign the new user in."""
    try:
        signup_request = SignupRequest(email=email, password=password)
    except ValueError as e:
        return _redirect(settings.signup_path, str(e))
    
    response = _redirect(settings.post_login_path)
    gateway = client_factory.create_server_client(
        session_cookies(request), response, privileged=True
    )
    saga = SignupSaga(gateway, profile_store, reconciliation_sink)
    result = await saga.signup(signup_request)
    
    if result.requires_reconciliation:
        logger.error(f"Signup needs reconciliation: {result.error.details}")
        return _redirect(settings.signup_path, GENERIC_SIGNUP_FAILURE)
    
    if not result.ok:
        return _redirect(settings.signup_path, result.error.message)
    
    try:
        await gateway.authenticate(signup_request.email, signup_request.password)
    except (InvalidCredentialsError, IdentityProviderError) as e:
        logger.warning(f"Sign-in after signup failed for identity {result.identity.id}: {e}")
        return _redirect(settings.login_path, "Your account was created. Please sign in.")
    
    return response


@router.post("/login")
async def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    next_path: Optional[str] = Form(None, alias="next"),
    client_factory: IdentityClientFactory = Depends(get_client_factory),
    settings: WellcoachSettings = Depends(get_app_settings),
):
    """Sign in with email and password."""
    response = _redirect(_safe_next(next_path, settings.post_login_path))
    gateway = client_factory.create_server_client(session_cookies(request), response)
    
    try:
        user = await gateway.authenticate(email.strip().lower(), password)
    except InvalidCredentialsError:
        return _redirect(settings.login_path, "Invalid email or password")
    except IdentityProviderError as e:
        logger.error(f"Sign-in unavailable: {e}")
        return _redirect(settings.login_path, "Sign-in is temporarily unavailable")
    
    logger.info(f"User {user.id} signed in")
    return response


@router.post("/logout")
async def logout(
    request: Request,
    client_factory: IdentityClientFactory = Depends(get_client_factory),
    settings: WellcoachSettings = Depends(get_app_settings),
):
    """Sign out and clear the session cookies."""
    response = _redirect(settings.login_path)
    gateway = client_factory.create_server_client(session_cookies(request), response)
    await gateway.sign_out()
    return response


@router.get("/session", response_model=SessionResponse)
async def current_session(
    user: Optional[AuthenticatedUser] = Depends(get_current_user),
) -> SessionResponse:
    """Report whether the current request carries a valid session."""
    if user is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True,
        user=UserResponse(id=user.id.value, email=user.email),
    )
