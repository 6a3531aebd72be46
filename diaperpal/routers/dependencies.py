"""Request-scoped dependencies resolving handlers from the app container."""
import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from diaperpal.handlers import AdminHandler, VenueHandler

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request):
    """Get the container from app state, raising 503 if startup hasn't finished."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return container


def get_venue_handler(container=Depends(get_container)) -> VenueHandler:
    return container.venue_handler


def get_admin_handler(container=Depends(get_container)) -> AdminHandler:
    return container.admin_handler


def require_admin(
    container=Depends(get_container),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    """Check the Bearer token against the configured admin password.

    With no admin password configured every request is rejected.
    """
    admin_password = container.settings.admin_password
    if not admin_password:
        logger.error("[AdminAuth] ADMIN_PASSWORD is not set, denying admin access")
        raise HTTPException(
            status_code=401,
            detail="Unauthorized. Check that ADMIN_PASSWORD is set in environment variables.",
        )

    if credentials is None or not hmac.compare_digest(
        credentials.credentials.encode("utf-8"), admin_password.encode("utf-8")
    ):
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
