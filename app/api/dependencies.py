"""
Shared FastAPI dependencies: database session, DI container and the
authenticated principal.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.container import DependencyContainer, get_container
from app.database.async_db import get_async_db

logger = logging.getLogger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_async_db)]


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, taken from the bearer token claims."""

    id: str
    role: str | None = None
    email: str | None = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Principal":
        return cls(id=str(claims["sub"]), role=claims.get("role"), email=claims.get("email"))

    @property
    def display_name(self) -> str:
        return self.email or self.id


def get_di_container() -> DependencyContainer:
    """[GLOBAL] Get Dependency Injection Container singleton."""
    return get_container()


def get_current_principal(request: Request) -> Principal:
    """
    Resolve the caller from ``request.state.user``.

    The AuthenticationMiddleware has already validated the token.

    Raises:
        HTTPException: 401 when no authenticated user is attached
    """
    claims = getattr(request.state, "user", None)
    if not claims or not claims.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Principal.from_claims(claims)


Container = Annotated[DependencyContainer, Depends(get_di_container)]
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]

__all__ = [
    "Container",
    "CurrentPrincipal",
    "DbSession",
    "Principal",
    "get_current_principal",
    "get_di_container",
]
