"""Role-based authorization helpers."""

from fastapi import Depends, HTTPException, status

from stockpilot.api.auth import get_current_user
from stockpilot.core.logging import get_logger
from stockpilot.models.user import User, UserRole

logger = get_logger(__name__)


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Dependency to require ADMIN role."""
    if current_user.role != UserRole.ADMIN:
        logger.warning(
            "auth.permission_denied",
            user_id=str(current_user.id),
            required_role="ADMIN",
            user_role=current_user.role,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to access this resource",
        )
    return current_user
