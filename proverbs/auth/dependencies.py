from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from .jwt_handler import JWTHandler
from .schemas import User

# Bearer Token Scheme mainly for Swagger UI
oauth2_scheme = HTTPBearer(auto_error=True)


def get_jwt_handler(request: Request) -> JWTHandler:
    """Dependency returning the JWT handler built at startup."""
    if not hasattr(request.app.state, "jwt_handler"):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication not initialized",
        )
    return request.app.state.jwt_handler


async def verify_current_user(
    token: HTTPAuthorizationCredentials = Depends(oauth2_scheme),
    handler: JWTHandler = Depends(get_jwt_handler),
) -> User:
    """
    Verify the bearer JWT.
    Returns the User object if valid, raises 401 otherwise.
    """
    try:
        payload = handler.validate_access_token(token.credentials)
        if not payload:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return User(
            id=str(payload["sub"]),
            email=payload.get("email"),
            is_admin=payload.get("is_admin") is True,
        )

    except HTTPException:
        raise
    except Exception as e:
        # Security: log error type only, not full message (may contain sensitive info)
        logger.error(f"Token verification failed: {type(e).__name__}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_admin(current_user: User = Depends(verify_current_user)) -> User:
    """Allow only callers whose token carries `is_admin: true`."""
    if not current_user.is_admin:
        logger.warning(f"Non-admin user {current_user.id} attempted an admin operation")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user
