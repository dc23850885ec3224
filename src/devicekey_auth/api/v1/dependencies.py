"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from devicekey_auth.db.session import get_db
from devicekey_auth.repositories.user_repo import UserRepository
from devicekey_auth.services.auth_service import AuthService
from devicekey_auth.services.tokens import TokenIssuer, get_token_issuer

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
TokenIssuerDep = Annotated[TokenIssuer, Depends(get_token_issuer)]


def get_auth_service(db: SessionDep, token_issuer: TokenIssuerDep) -> AuthService:
    """Build the auth service bound to the request's database session."""
    return AuthService(db, token_issuer=token_issuer)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_current_email(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
    token_issuer: TokenIssuerDep,
) -> str:
    """Return the e-mail of the authenticated caller.

    Raises:
        HTTPException: If the bearer token is missing, invalid, or names an
            account that no longer exists.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    try:
        email = token_issuer.decode_subject(credentials.credentials)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    if UserRepository(db).get_by_email(email) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return email


# Type alias for current user dependency
CurrentEmailDep = Annotated[str, Depends(get_current_email)]
