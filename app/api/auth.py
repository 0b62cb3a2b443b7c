from fastapi import APIRouter, Depends
from app.core.security import get_permissions

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/permissions")
async def current_permissions(permissions: set[str] = Depends(get_permissions)):
    """Permissions granted to the presented X-API-Key"""
    return {
        "success": True,
        "data": {"permissions": sorted(permissions)},
        "message": "API key is valid"
    }
