"""FastHTML application object and the request helpers shared by all pages."""

import logging
from typing import Optional

import httpx
from fasthtml.common import *

from ..session import SessionStore, UserSession
from ..settings import Settings, load_settings
from .components import page_layout

logger = logging.getLogger(__name__)

_settings = load_settings()

# Create FastHTML app
app, rt = fast_app(
    secret_key=_settings.secret_key,
    pico=False,
)

# Lazy-loaded globals
_store: Optional[SessionStore] = None


def configure(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SessionStore:
    """Point the app at a backend. Replaces every existing visitor session."""
    global _store, _settings
    _settings = settings or load_settings()
    _store = SessionStore(_settings, transport)
    logger.info(f"Storefront backend: {_settings.api_url}")
    return _store


def get_store() -> SessionStore:
    """Get or create the session store."""
    global _store
    if _store is None:
        _store = SessionStore(_settings)
    return _store


async def open_session(request) -> UserSession:
    """Session for the visitor behind ``request``, with the user looked up."""
    session = get_store().get(request.cookies.get(_settings.session_cookie))
    await session.auth.load()
    return session


def _with_cookie(response, session: UserSession):
    response.set_cookie(
        _settings.session_cookie,
        session.id,
        max_age=_settings.session_max_age,
        httponly=True,
        samesite="lax",
    )
    return response


def render(session: UserSession, title: str, *content, status_code: int = 200):
    """Render a full page for ``session``."""
    page = page_layout(
        title,
        *content,
        user=session.user,
        cart_count=session.cart.item_count,
        flashes=session.pop_flash(),
    )
    response = Response(content=to_xml(page), media_type="text/html", status_code=status_code)
    return _with_cookie(response, session)


def redirect(session: UserSession, url: str):
    return _with_cookie(RedirectResponse(url, status_code=303), session)


def require_user(session: UserSession):
    """Redirect to the login page when nobody is logged in, else None."""
    if session.user is None:
        return redirect(session, "/login")
    return None


def require_admin(session: UserSession):
    """Redirect anonymous visitors to login and customers to the shop front."""
    if session.user is None:
        return redirect(session, "/login")
    if not session.user.is_admin:
        session.flash("Administrator access is required.", "error")
        return redirect(session, "/")
    return None


def to_int(value, default: Optional[int] = None) -> Optional[int]:
    """Parse an optional integer form/query value."""
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def to_float(value, default: Optional[float] = None) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return default
    try:
        return float(str(value).strip())
    except ValueError:
        return default


def blank_to_none(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
