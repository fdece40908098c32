"""
Shared dependencies for the application.

Provides dependency injection functions used across routers. The
repository and settings live on ``app.state`` and are set by
``create_app``; nothing here is a module-level global.
"""

from urllib.parse import urlsplit

from fastapi import Depends, Request

from .config import Settings
from .repositories.cell_repository import ICellRepository
from .security import Session, decode_session_token

DEFAULT_RETURN_PATH = "/rooms"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> ICellRepository:
    """
    Get the cell repository for dependency injection.

    Raises:
        RuntimeError: If the application was built without a repository
    """
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise RuntimeError("Cell repository not initialized")
    return repository


def get_session(
    request: Request, settings: Settings = Depends(get_settings)
) -> Session:
    """Read the session cookie. With AUTH_DISABLED every visitor is authenticated."""
    if settings.AUTH_DISABLED:
        return Session(authenticated=True)
    return decode_session_token(
        request.cookies.get(settings.SESSION_COOKIE_NAME), settings
    )


class LoginRequiredException(Exception):
    """Raised by require_login; the app turns it into a redirect to /login."""

    def __init__(self, next_path: str):
        self.next_path = next_path
        super().__init__(f"Login required for {next_path}")


def _local_target(path: str, query: str) -> str:
    return f"{path}?{query}" if query else path


def login_return_path(request: Request) -> str:
    """
    Page to come back to after logging in.

    GET requests return to themselves, query string included. Form posts
    cannot be replayed, so they return to the local page that sent them,
    else to the editor page the form belongs to, else to /rooms.
    """
    url = request.url
    if request.method == "GET":
        return _local_target(url.path, url.query)

    referer = urlsplit(request.headers.get("referer", ""))
    if (
        referer.netloc in ("", url.netloc)
        and referer.path.startswith("/")
        and not referer.path.startswith("//")
    ):
        return _local_target(referer.path, referer.query)

    if url.path == "/newCell":
        return "/new"
    if "cell_id" in request.path_params:
        # /cell/{cell_id}/sources/add -> /cell/{cell_id}/sources
        return url.path.rsplit("/", 1)[0]
    return DEFAULT_RETURN_PATH


def require_login(request: Request, session: Session = Depends(get_session)) -> Session:
    """
    Gate a route behind the login.

    Raises:
        LoginRequiredException: If the visitor is not authenticated
    """
    if not session.authenticated:
        raise LoginRequiredException(login_return_path(request))
    return session
