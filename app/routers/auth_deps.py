"""
RBAC Dependencies.
Turns the bearer token into an explicit Actor for the service layer.
"""
import logging
from typing import Callable, Sequence

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError

from app.schemas.auth import Actor, TokenData, UserRole
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    """
    Extracts and validates the caller from the JWT token.
    Fast context without a database hit.
    """
    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="TOKEN_EXPIRED",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        token_data = TokenData(**payload)
        if token_data.sub is None or token_data.role is None:
            raise ValueError("missing subject or role")
        return Actor(
            user_id=token_data.sub,
            role=UserRole(token_data.role),
            employee_id=token_data.employee_id,
        )
    except (ValidationError, ValueError) as e:
        logger.warning(f"Authentication failed: Malformed claims ({e})")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_role(allowed_roles: Sequence[UserRole]) -> Callable:
    """
    Dependency factory that checks if the caller has one of the allowed roles.

    Usage:
        @router.post("/rollover")
        def rollover(actor: Actor = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    def role_checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return actor
    return role_checker


def require_payroll_admin():
    """Shorthand for payroll administration (HR and ADMIN)."""
    return require_role([UserRole.HR, UserRole.ADMIN])


def require_admin():
    return require_role([UserRole.ADMIN])
