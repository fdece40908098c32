"""
Login and logout for the editing gate.
"""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..config import Settings
from ..dependencies import get_session, get_settings
from ..logging_config import get_logger
from ..metrics import track_login
from ..security import Session, create_session_token, verify_password
from ..templating import render

logger = get_logger(__name__)

router = APIRouter(tags=["Auth"])

ACCESS_DENIED_MESSAGE = "You don't have access!"
DEFAULT_NEXT = "/rooms"


def safe_next(next_path: str) -> str:
    """Only allow redirects to local paths."""
    if next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return DEFAULT_NEXT


@router.get("/login", response_class=HTMLResponse, summary="Login page")
async def login_page(
    request: Request,
    next: str = DEFAULT_NEXT,
    session: Session = Depends(get_session),
) -> HTMLResponse:
    return render(
        request,
        "login.html",
        context={"next": safe_next(next), "flash": None},
        session=session,
    )


@router.post("/login", summary="Log in")
async def login(
    request: Request,
    password: str = Form(""),
    next: str = Form(DEFAULT_NEXT),
    settings: Settings = Depends(get_settings),
):
    """
    Check the password and set the session cookie.

    A wrong password renders the login page again with status 401.
    """
    if not verify_password(password, settings.ADMIN_PASSWORD_HASH):
        track_login(success=False)
        logger.warning(
            "Login failed",
            extra={
                "extra_fields": {
                    "client_host": request.client.host if request.client else None
                }
            },
        )
        return render(
            request,
            "login.html",
            context={"next": safe_next(next), "flash": ACCESS_DENIED_MESSAGE},
            status_code=401,
        )

    track_login(success=True)
    logger.info("Login succeeded")
    response = RedirectResponse(url=safe_next(next), status_code=302)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_token(Session(authenticated=True), settings),
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return response


@router.post("/logout", summary="Log out")
async def logout(settings: Settings = Depends(get_settings)):
    response = RedirectResponse(url=DEFAULT_NEXT, status_code=302)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
