"""
Jinja2 template setup shared by the routers.
"""

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from .config import PACKAGE_DIR
from .security import ANONYMOUS, Session

templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))


def paragraphs(text: Optional[str]) -> list:
    """Split a cell body into non-empty paragraphs for rendering."""
    if not text:
        return []
    return [block.strip() for block in text.split("\n\n") if block.strip()]


templates.env.filters["paragraphs"] = paragraphs


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
    session: Session = ANONYMOUS,
) -> HTMLResponse:
    """
    Render a template with the values every page needs.

    Args:
        request: Current request
        name: Template file name
        context: Page-specific values
        status_code: HTTP status of the response
        session: Session of the visitor, drives edit links in the layout

    Returns:
        Rendered HTML response
    """
    page_context: Dict[str, Any] = {
        "app_name": request.app.state.settings.APP_NAME,
        "authenticated": session.authenticated,
    }
    page_context.update(context or {})
    return templates.TemplateResponse(
        request=request,
        name=name,
        context=page_context,
        status_code=status_code,
    )


def not_found(request: Request, message: str = "") -> HTMLResponse:
    """Render the card-not-found page with status 404."""
    return render(
        request,
        "card_not_found.html",
        context={"message": message},
        status_code=404,
    )
