# API key permissions

from fastapi import Header, HTTPException, Request, status
from app.core.config import Settings
from app.core.constants import ERROR_MESSAGES, PERMISSIONS
import structlog

logger = structlog.get_logger()


def resolve_permissions(settings: Settings, api_key: str | None) -> set[str]:
    """Permission set carried by a request.

    With auth disabled every caller holds all permissions.
    """
    if not settings.auth_enabled:
        return set(PERMISSIONS)

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": ERROR_MESSAGES["UNAUTHORIZED"], "message": "X-API-Key header is required"}
        )

    permissions = settings.api_keys.get(api_key)
    if permissions is None:
        logger.warning("unknown_api_key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": ERROR_MESSAGES["UNAUTHORIZED"], "message": "Invalid API key"}
        )

    return {permission for permission in permissions if permission in PERMISSIONS}


def get_permissions(request: Request, x_api_key: str | None = Header(default=None)) -> set[str]:
    return resolve_permissions(request.app.state.settings, x_api_key)


def require_permission(permission: str):
    """Dependency factory gating an endpoint on one permission"""

    def dependency(request: Request, x_api_key: str | None = Header(default=None)) -> set[str]:
        permissions = resolve_permissions(request.app.state.settings, x_api_key)
        if permission not in permissions:
            logger.warning("permission_denied", required=permission, path=request.url.path)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": ERROR_MESSAGES["FORBIDDEN"],
                    "message": f"Insufficient permissions. Required permission: {permission}"
                }
            )
        return permissions

    return dependency


require_read = require_permission("read")
require_write = require_permission("write")
require_delete = require_permission("delete")
